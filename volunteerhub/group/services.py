"""Service layer for group operations and data orchestration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from volunteerhub.constants import (
    DEFAULT_CREATOR_NAME,
    GROUP_MEMBERS_COLLECTION,
    GROUP_PRIVACY_CHOICES,
    GROUP_SEARCH_LIMIT,
    GROUPS_COLLECTION,
    PRIVACY_PUBLIC,
    ROLE_ADMIN,
    ROLE_MEMBER,
    STATUS_NON_MEMBER,
    STATUS_PENDING,
)
from volunteerhub.core.keys import membership_id
from volunteerhub.errors import DuplicateResourceError, NotFoundError, ValidationError
from volunteerhub.event.services import EventService

from .membership import MembershipService
from .models import Group

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

    from volunteerhub.user.models import UserSession


class GroupService:
    """Service class for group-related operations."""

    @staticmethod
    def get_group(db: Client, group_id: str) -> Group:
        """Fetch a group or raise ``NotFoundError``."""
        doc = cast(
            "DocumentSnapshot", db.collection(GROUPS_COLLECTION).document(group_id).get()
        )
        if not doc.exists:
            raise NotFoundError("Group not found.")
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return cast(Group, data)

    @staticmethod
    def create_group(
        db: Client,
        name: str,
        description: str,
        privacy: str,
        creator: UserSession,
    ) -> dict[str, Any]:
        """Create a group with its creator as the first admin.

        Names are unique and case-sensitive. The uniqueness check is a read
        before the write, so two simultaneous creations can still collide.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Group name is required.")
        if privacy not in GROUP_PRIVACY_CHOICES:
            raise ValidationError(f"Unknown group privacy '{privacy}'.")

        existing = (
            db.collection(GROUPS_COLLECTION)
            .where(filter=firestore.FieldFilter("name", "==", name))
            .limit(1)
            .stream()
        )
        if list(existing):
            raise DuplicateResourceError(
                "A group with this name already exists. Please choose another."
            )

        group_ref = db.collection(GROUPS_COLLECTION).document()
        group_data = {
            "name": name,
            "description": description,
            "privacy": privacy,
            "creatorId": creator.uid,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        member_id = membership_id(group_ref.id, creator.uid)
        membership = {
            "groupId": group_ref.id,
            "userId": creator.uid,
            "userName": creator.full_name or DEFAULT_CREATOR_NAME,
            "userEmail": creator.email,
            "role": ROLE_ADMIN,
            "joinedAt": firestore.SERVER_TIMESTAMP,
        }

        batch = db.batch()
        batch.set(group_ref, group_data)
        batch.set(db.collection(GROUP_MEMBERS_COLLECTION).document(member_id), membership)
        batch.commit()
        return {
            "group": {**group_data, "id": group_ref.id},
            "membership": {**membership, "id": member_id},
        }

    @staticmethod
    def get_all_groups(db: Client) -> list[Group]:
        """Fetch every group."""
        groups = []
        for doc in db.collection(GROUPS_COLLECTION).stream():
            if not doc.exists:
                continue
            data = doc.to_dict() or {}
            data["id"] = doc.id
            groups.append(cast(Group, data))
        return groups

    @staticmethod
    def search_groups(db: Client, name: str) -> list[Group]:
        """Find groups whose name starts with ``name``."""
        query = (
            db.collection(GROUPS_COLLECTION)
            .where(filter=firestore.FieldFilter("name", ">=", name))
            .where(filter=firestore.FieldFilter("name", "<=", name + "\uf8ff"))
            .limit(GROUP_SEARCH_LIMIT)
        )
        results = []
        for doc in query.stream():
            data = doc.to_dict() or {}
            data["id"] = doc.id
            results.append(cast(Group, data))
        return results

    @staticmethod
    def get_user_groups(db: Client, user_id: str) -> list[Group]:
        """Fetch the groups a user is a member of."""
        memberships = (
            db.collection(GROUP_MEMBERS_COLLECTION)
            .where(filter=firestore.FieldFilter("userId", "==", user_id))
            .stream()
        )
        group_ids = sorted({(doc.to_dict() or {}).get("groupId") for doc in memberships})

        groups = []
        for group_id in group_ids:
            if not group_id:
                continue
            doc = db.collection(GROUPS_COLLECTION).document(group_id).get()
            if doc.exists:
                data = doc.to_dict() or {}
                data["id"] = doc.id
                groups.append(cast(Group, data))
        return groups

    @staticmethod
    def get_viewer_status(
        db: Client, group_id: str, members: list[Any], user_id: str | None
    ) -> str:
        """Return ``admin``, ``member``, ``pending`` or ``non-member``."""
        if not user_id:
            return STATUS_NON_MEMBER
        membership = next((m for m in members if m.get("userId") == user_id), None)
        if membership:
            return membership.get("role", ROLE_MEMBER)
        if MembershipService.has_pending_request(db, group_id, user_id):
            return STATUS_PENDING
        return STATUS_NON_MEMBER

    @staticmethod
    def get_group_details(
        db: Client, group_id: str, user: UserSession | None
    ) -> dict[str, Any]:
        """Fetch everything the group page shows to this viewer.

        Members and events are only included when the group is public or the
        viewer belongs to it; join requests only when the viewer is an admin.
        """
        group = GroupService.get_group(db, group_id)
        members = MembershipService.get_group_members(db, group_id)
        status = GroupService.get_viewer_status(
            db, group_id, members, user.uid if user else None
        )
        is_member = status in (ROLE_ADMIN, ROLE_MEMBER)
        can_view = is_member or group.get("privacy") == PRIVACY_PUBLIC

        current_events: list[dict[str, Any]] = []
        past_events: list[dict[str, Any]] = []
        if can_view:
            events = EventService.get_group_events(db, group_id)
            current_events, past_events = EventService.split_current_and_past(events)

        requests = (
            MembershipService.get_join_requests(db, group_id)
            if status == ROLE_ADMIN
            else []
        )

        return {
            "group": group,
            "viewerStatus": status,
            "canViewContent": can_view,
            "members": members if can_view else [],
            "memberCount": len(members),
            "currentEvents": current_events,
            "pastEvents": past_events,
            "joinRequests": requests,
            "leaveConfirmation": (
                MembershipService.leave_confirmation_message(len(members))
                if is_member
                else None
            ),
        }
