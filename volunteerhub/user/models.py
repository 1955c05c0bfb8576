"""Data models for user profiles."""

from __future__ import annotations

from collections import UserDict
from typing import Any

from flask_login import UserMixin

from volunteerhub.core.types import FirestoreDocument


class User(FirestoreDocument, total=False):
    """A user document in Firestore."""

    uid: str
    fullName: str
    email: str


class UserSession(UserDict, UserMixin):
    """The signed-in principal: provider profile merged with the stored profile.

    Keys follow the identity provider (``uid``, ``displayName``, ``email``)
    plus ``fullName`` from the ``users`` document when one exists.
    """

    def get_id(self) -> str:
        """Return the user ID."""
        return str(self.get("uid", ""))

    @property
    def uid(self) -> str:
        """Return the user ID."""
        return self.get_id()

    @property
    def email(self) -> str | None:
        """Return the email reported by the identity provider."""
        return self.get("email")

    @property
    def full_name(self) -> str | None:
        """Return the stored full name, falling back to the provider's display name."""
        return self.get("fullName") or self.get("displayName") or None

    def to_public_dict(self) -> dict[str, Any]:
        """Return the fields safe to send back to the client."""
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.get("displayName"),
            "fullName": self.full_name,
        }
