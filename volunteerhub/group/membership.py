"""Membership operations: join, approve, deny, promote, kick and leave.

Memberships and join requests are keyed ``{groupId}_{userId}``, so repeating
a join or an approval overwrites the same document instead of duplicating it.
The only cross-document invariant, that a group keeps at least one admin while
it exists, is held by composing the leave transition as a single write batch.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore
from flask import current_app

from volunteerhub.constants import (
    DEFAULT_JOINER_NAME,
    GROUP_MEMBERS_COLLECTION,
    JOIN_REQUESTS_COLLECTION,
    LAST_MEMBER_LEAVE_MESSAGE,
    LEAVE_MESSAGE,
    PRIVACY_PRIVATE,
    PRIVACY_PUBLIC,
    ROLE_ADMIN,
    ROLE_MEMBER,
)
from volunteerhub.core.keys import membership_id
from volunteerhub.errors import NotFoundError, UnauthenticatedError, ValidationError
from volunteerhub.functions.cascade import delete_group_on_last_leave
from volunteerhub.user.services import UserService

from .models import GroupMember, JoinRequest

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

DeleteGroup = Callable[["Client", str, Mapping[str, Any]], Mapping[str, Any]]


class MembershipService:
    """Service class for group membership operations."""

    @staticmethod
    def get_group_members(db: Client, group_id: str) -> list[GroupMember]:
        """Fetch every membership of a group, fresh from the store."""
        query = db.collection(GROUP_MEMBERS_COLLECTION).where(
            filter=firestore.FieldFilter("groupId", "==", group_id)
        )
        members = []
        for doc in query.stream():
            data = doc.to_dict() or {}
            data["id"] = doc.id
            members.append(cast(GroupMember, data))
        return members

    @staticmethod
    def get_membership(db: Client, group_id: str, user_id: str) -> GroupMember | None:
        """Fetch one user's membership of a group."""
        doc = cast(
            "DocumentSnapshot",
            db.collection(GROUP_MEMBERS_COLLECTION)
            .document(membership_id(group_id, user_id))
            .get(),
        )
        if not doc.exists:
            return None
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return cast(GroupMember, data)

    @staticmethod
    def get_join_requests(db: Client, group_id: str) -> list[JoinRequest]:
        """Fetch the pending join requests of a group."""
        query = db.collection(JOIN_REQUESTS_COLLECTION).where(
            filter=firestore.FieldFilter("groupId", "==", group_id)
        )
        requests = []
        for doc in query.stream():
            data = doc.to_dict() or {}
            data["id"] = doc.id
            requests.append(cast(JoinRequest, data))
        return requests

    @staticmethod
    def has_pending_request(db: Client, group_id: str, user_id: str) -> bool:
        """Return True if the user is waiting for approval to join the group."""
        doc = cast(
            "DocumentSnapshot",
            db.collection(JOIN_REQUESTS_COLLECTION)
            .document(membership_id(group_id, user_id))
            .get(),
        )
        return bool(doc.exists)

    @staticmethod
    def request_to_join_group(
        db: Client, group_id: str, privacy: str, user: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Join a public group, or ask to join a private one.

        Returns ``{"status": "joined", "membership": ...}`` for public groups and
        ``{"status": "pending", "request": ...}`` for private ones.
        """
        if not user or not user.get("uid"):
            raise UnauthenticatedError("User not authenticated or UID missing.")
        if privacy not in (PRIVACY_PUBLIC, PRIVACY_PRIVATE):
            raise ValidationError(f"Unknown group privacy '{privacy}'.")

        uid = user["uid"]
        user_name = UserService.resolve_display_name(db, user, DEFAULT_JOINER_NAME)
        doc_id = membership_id(group_id, uid)

        if privacy == PRIVACY_PUBLIC:
            membership = {
                "groupId": group_id,
                "userId": uid,
                "userName": user_name,
                "userEmail": user.get("email"),
                "role": ROLE_MEMBER,
                "joinedAt": firestore.SERVER_TIMESTAMP,
            }
            db.collection(GROUP_MEMBERS_COLLECTION).document(doc_id).set(membership)
            return {"status": "joined", "membership": {**membership, "id": doc_id}}

        join_request = {
            "groupId": group_id,
            "userId": uid,
            "userName": user_name,
            "requestedAt": firestore.SERVER_TIMESTAMP,
        }
        db.collection(JOIN_REQUESTS_COLLECTION).document(doc_id).set(join_request)
        return {"status": "pending", "request": {**join_request, "id": doc_id}}

    @staticmethod
    def approve_join_request(
        db: Client, group_id: str, target_user: Mapping[str, str]
    ) -> GroupMember:
        """Turn a join request into a membership in one atomic batch.

        Raises ``NotFoundError`` when the user has no pending request.
        """
        if not MembershipService.has_pending_request(db, group_id, target_user["id"]):
            raise NotFoundError("Join request not found.")
        doc_id = membership_id(group_id, target_user["id"])
        membership = {
            "groupId": group_id,
            "userId": target_user["id"],
            "userName": target_user["name"],
            "role": ROLE_MEMBER,
            "joinedAt": firestore.SERVER_TIMESTAMP,
        }

        batch = db.batch()
        batch.set(db.collection(GROUP_MEMBERS_COLLECTION).document(doc_id), membership)
        batch.delete(db.collection(JOIN_REQUESTS_COLLECTION).document(doc_id))
        batch.commit()
        return cast(GroupMember, {**membership, "id": doc_id})

    @staticmethod
    def deny_join_request(db: Client, group_id: str, target_user_id: str) -> None:
        """Delete a join request. Denying a request that is gone is a no-op."""
        db.collection(JOIN_REQUESTS_COLLECTION).document(
            membership_id(group_id, target_user_id)
        ).delete()

    @staticmethod
    def promote_to_admin(db: Client, group_id: str, target_user_id: str) -> None:
        """Give a member the admin role."""
        member_ref = db.collection(GROUP_MEMBERS_COLLECTION).document(
            membership_id(group_id, target_user_id)
        )
        if not member_ref.get().exists:
            raise NotFoundError("That user is not a member of this group.")
        member_ref.set({"role": ROLE_ADMIN}, merge=True)

    @staticmethod
    def kick_member(db: Client, group_id: str, target_user_id: str) -> None:
        """Remove a member from a group."""
        db.collection(GROUP_MEMBERS_COLLECTION).document(
            membership_id(group_id, target_user_id)
        ).delete()

    @staticmethod
    def leave_confirmation_message(member_count: int) -> str:
        """Return the text the user must confirm before leaving."""
        if member_count == 1:
            return LAST_MEMBER_LEAVE_MESSAGE
        return LEAVE_MESSAGE

    @staticmethod
    def leave_group(
        db: Client,
        group_id: str,
        user: Mapping[str, Any],
        delete_group: DeleteGroup | None = None,
    ) -> dict[str, Any]:
        """Leave a group.

        The last member leaving tears the whole group down through
        ``delete_group``. An admin leaving while others remain hands the admin
        role to the first other member in the same batch that removes the
        admin's membership. Anyone else just loses their membership.

        Returns ``{"outcome": "deleted"|"left", "groupId", "promotedUserId"}``.
        """
        if not user or not user.get("uid"):
            raise UnauthenticatedError()
        if delete_group is None:
            delete_group = delete_group_on_last_leave

        uid = user["uid"]
        members = MembershipService.get_group_members(db, group_id)
        leaving = next((m for m in members if m.get("userId") == uid), None)
        if leaving is None:
            raise NotFoundError("You are not a member of this group.")

        if len(members) == 1:
            result = delete_group(db, group_id, user)
            return {
                "outcome": "deleted",
                "groupId": group_id,
                "promotedUserId": None,
                "message": result.get("message"),
            }

        members_ref = db.collection(GROUP_MEMBERS_COLLECTION)
        member_ref = members_ref.document(membership_id(group_id, uid))
        others = [m for m in members if m.get("userId") != uid]

        if leaving.get("role") == ROLE_ADMIN and others:
            new_admin = others[0]
            batch = db.batch()
            batch.delete(member_ref)
            batch.update(
                members_ref.document(membership_id(group_id, new_admin["userId"])),
                {"role": ROLE_ADMIN},
            )
            batch.commit()
            current_app.logger.info(
                f"Admin {uid} left group {group_id}; promoted {new_admin['userId']}"
            )
            return {
                "outcome": "left",
                "groupId": group_id,
                "promotedUserId": new_admin["userId"],
            }

        member_ref.delete()
        return {"outcome": "left", "groupId": group_id, "promotedUserId": None}
