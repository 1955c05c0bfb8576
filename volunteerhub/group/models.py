"""Data models for the group blueprint."""

from __future__ import annotations

from typing import Any, Literal, TypedDict

from volunteerhub.core.types import FirestoreDocument

Privacy = Literal["public", "private"]
Role = Literal["admin", "member"]


class Group(FirestoreDocument, total=False):
    """A group document in Firestore."""

    name: str
    description: str
    privacy: Privacy
    creatorId: str


class GroupMember(TypedDict, total=False):
    """A membership document, keyed ``{groupId}_{userId}``."""

    id: str
    groupId: str
    userId: str
    userName: str
    userEmail: str | None
    role: Role
    joinedAt: Any


class JoinRequest(TypedDict, total=False):
    """A pending request to join a private group, keyed ``{groupId}_{userId}``."""

    id: str
    groupId: str
    userId: str
    userName: str
    requestedAt: Any
