"""Deletes a group and everything that depends on it when its last member leaves."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from volunteerhub.constants import (
    EVENT_SIGNUPS_COLLECTION,
    EVENTS_COLLECTION,
    GROUP_MEMBERS_COLLECTION,
    GROUPS_COLLECTION,
    JOIN_REQUESTS_COLLECTION,
)
from volunteerhub.errors import (
    AppError,
    InternalError,
    PermissionDeniedError,
    UnauthenticatedError,
    ValidationError,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.batch import WriteBatch
    from google.cloud.firestore_v1.client import Client


def delete_group_on_last_leave(
    db: Client, group_id: Any, principal: Mapping[str, Any] | None
) -> dict[str, str]:
    """Delete a group, its membership, requests, events and signups atomically.

    The caller must be the group's one remaining member; this is checked here
    against the store rather than trusted from the client. All deletes go into
    a single write batch, so either everything is removed or nothing is.

    Raises:
        UnauthenticatedError: no principal.
        ValidationError: ``group_id`` missing or not a string.
        PermissionDeniedError: the caller is not the sole remaining member.
        InternalError: anything unexpected; the detail is only logged.
    """
    if not principal or not principal.get("uid"):
        raise UnauthenticatedError()
    if not group_id or not isinstance(group_id, str):
        raise ValidationError("A valid groupId must be provided.")

    uid = principal["uid"]
    try:
        members = list(
            db.collection(GROUP_MEMBERS_COLLECTION)
            .where(filter=firestore.FieldFilter("groupId", "==", group_id))
            .stream()
        )
        if len(members) != 1 or (members[0].to_dict() or {}).get("userId") != uid:
            raise PermissionDeniedError(
                "You are not the last member and cannot delete this group."
            )

        batch = db.batch()
        batch.delete(db.collection(GROUPS_COLLECTION).document(group_id))
        batch.delete(members[0].reference)
        _delete_join_requests(db, batch, group_id)
        deleted_events = _delete_events_and_signups(db, batch, group_id)
        batch.commit()
    except AppError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error deleting group {group_id}: {e}")
        raise InternalError(
            "An unexpected error occurred while deleting the group."
        ) from e

    current_app.logger.info(
        f"Deleted group {group_id} and {deleted_events} event(s) after last member "
        f"{uid} left"
    )
    return {
        "status": "success",
        "message": f"Successfully deleted group {group_id}",
    }


def _delete_join_requests(db: Client, batch: WriteBatch, group_id: str) -> None:
    """Queue deletion of every join request for the group."""
    requests_query = db.collection(JOIN_REQUESTS_COLLECTION).where(
        filter=firestore.FieldFilter("groupId", "==", group_id)
    )
    for doc in requests_query.stream():
        batch.delete(doc.reference)


def _delete_events_and_signups(db: Client, batch: WriteBatch, group_id: str) -> int:
    """Queue deletion of every event of the group and each event's signups."""
    events_query = db.collection(EVENTS_COLLECTION).where(
        filter=firestore.FieldFilter("groupId", "==", group_id)
    )
    event_ids = [doc.id for doc in events_query.stream()]
    for event_id in event_ids:
        batch.delete(db.collection(EVENTS_COLLECTION).document(event_id))
        signups_query = db.collection(EVENT_SIGNUPS_COLLECTION).where(
            filter=firestore.FieldFilter("eventId", "==", event_id)
        )
        for doc in signups_query.stream():
            batch.delete(doc.reference)
    return len(event_ids)
