"""Tracks the signed-in principal.

The identity provider is Firebase Authentication. A client signs in with the
Firebase SDK, then either exchanges its ID token for a server-side session
(``start_session``) or sends the token with each call as a bearer token
(``principal_from_request``), which is what callable functions do.

The principal is a ``UserSession``: the provider profile (``uid``,
``displayName``, ``email``) merged with the stored ``users`` document, whose
``fullName`` takes precedence over the provider's display name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import auth
from flask import current_app, session

from volunteerhub.errors import UnauthenticatedError
from volunteerhub.user.models import UserSession
from volunteerhub.user.services import UserService

if TYPE_CHECKING:
    from flask import Request
    from google.cloud.firestore_v1.client import Client

SESSION_USER_ID = "user_id"
SESSION_DISPLAY_NAME = "display_name"
SESSION_EMAIL = "email"


class SessionManager:
    """Creates, loads and clears the signed-in principal."""

    @staticmethod
    def verify_token(id_token: str | None) -> dict[str, Any]:
        """Verify a Firebase ID token and return its decoded claims."""
        if not id_token:
            raise UnauthenticatedError()
        try:
            return auth.verify_id_token(id_token)
        except Exception as e:
            current_app.logger.warning(f"Rejected ID token: {e}")
            raise UnauthenticatedError("Invalid or expired credentials.") from e

    @staticmethod
    def principal_from_claims(claims: dict[str, Any]) -> UserSession:
        """Build a principal from decoded token claims."""
        return UserSession(
            {
                "uid": claims["uid"],
                "displayName": claims.get("name"),
                "email": claims.get("email"),
            }
        )

    @staticmethod
    def principal_from_request(request: Request) -> UserSession | None:
        """Return the principal of a bearer-token request, or None if anonymous."""
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        claims = SessionManager.verify_token(header[len("Bearer ") :].strip())
        return SessionManager.principal_from_claims(claims)

    @staticmethod
    def start_session(db: Client, id_token: str | None) -> UserSession:
        """Exchange an ID token for a session, creating the profile on first sign-in."""
        principal = SessionManager.principal_from_claims(
            SessionManager.verify_token(id_token)
        )
        profile, created = UserService.ensure_user_profile(
            db, principal.uid, principal.get("displayName"), principal.email
        )
        if created:
            current_app.logger.info(f"Created profile for new user {principal.uid}")

        session.clear()
        session[SESSION_USER_ID] = principal.uid
        session[SESSION_DISPLAY_NAME] = principal.get("displayName")
        session[SESSION_EMAIL] = principal.email
        return SessionManager.merge_profile(principal, profile)

    @staticmethod
    def load_user(db: Client) -> UserSession | None:
        """Load the session's principal, merged with its stored profile."""
        user_id = session.get(SESSION_USER_ID)
        if user_id is None:
            return None
        principal = UserSession(
            {
                "uid": user_id,
                "displayName": session.get(SESSION_DISPLAY_NAME),
                "email": session.get(SESSION_EMAIL),
            }
        )
        profile = UserService.get_user_by_id(db, user_id)
        return SessionManager.merge_profile(principal, profile)

    @staticmethod
    def merge_profile(
        principal: UserSession, profile: dict[str, Any] | None
    ) -> UserSession:
        """Overlay the stored full name on the provider profile."""
        merged = UserSession(principal.data)
        merged["fullName"] = (profile or {}).get("fullName") or principal.get(
            "displayName"
        )
        if not merged.get("email") and profile:
            merged["email"] = profile.get("email")
        return merged

    @staticmethod
    def end_session() -> None:
        """Sign the user out of the server-side session."""
        session.clear()
