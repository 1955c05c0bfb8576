"""Service layer for user profile documents."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from volunteerhub.constants import USERS_COLLECTION
from volunteerhub.errors import ValidationError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client


class UserService:
    """Service class for user profile operations."""

    @staticmethod
    def get_user_by_id(db: Client, user_id: str) -> dict[str, Any] | None:
        """Fetch a user profile by its ID."""
        user_doc = cast(
            "DocumentSnapshot", db.collection(USERS_COLLECTION).document(user_id).get()
        )
        if not user_doc.exists:
            return None
        data = user_doc.to_dict() or {}
        data["id"] = user_id
        return data

    @staticmethod
    def create_user_profile(
        db: Client, user_id: str, full_name: str | None, email: str | None
    ) -> dict[str, Any]:
        """Write the profile document for a newly registered user."""
        profile = {
            "uid": user_id,
            "fullName": full_name,
            "email": email,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        db.collection(USERS_COLLECTION).document(user_id).set(profile)
        return profile

    @staticmethod
    def ensure_user_profile(
        db: Client, user_id: str, full_name: str | None, email: str | None
    ) -> tuple[dict[str, Any], bool]:
        """Return the stored profile, creating it on first sign-in.

        Returns a ``(profile, created)`` tuple.
        """
        existing = UserService.get_user_by_id(db, user_id)
        if existing is not None:
            return existing, False
        return UserService.create_user_profile(db, user_id, full_name, email), True

    @staticmethod
    def update_full_name(db: Client, user_id: str, full_name: str) -> dict[str, Any]:
        """Change a user's full name, the only mutable profile field."""
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError("Full name cannot be empty.")
        db.collection(USERS_COLLECTION).document(user_id).set(
            {"fullName": full_name}, merge=True
        )
        return {"uid": user_id, "fullName": full_name}

    @staticmethod
    def resolve_display_name(
        db: Client, user: Mapping[str, Any], fallback: str
    ) -> str:
        """Pick the name to store on membership documents.

        Priority is the stored profile's ``fullName``, then the identity
        provider's ``displayName``, then ``fallback``.
        """
        profile = UserService.get_user_by_id(db, user["uid"])
        if profile and profile.get("fullName"):
            return profile["fullName"]
        if user.get("displayName"):
            return user["displayName"]
        return fallback
