"""Service layer for events and event signups."""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from volunteerhub.constants import (
    DEFAULT_VOLUNTEER_NAME,
    EVENT_SIGNUPS_COLLECTION,
    EVENTS_COLLECTION,
    FIRESTORE_IN_QUERY_LIMIT,
    GROUP_MEMBERS_COLLECTION,
    GROUPS_COLLECTION,
    PRIVACY_PUBLIC,
    UNKNOWN_GROUP_NAME,
)
from volunteerhub.core.keys import signup_id
from volunteerhub.errors import (
    EventFullError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from volunteerhub.utils import as_datetime, chunked

from .models import Event, EventSignup, EventSubmission

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client


def _event_from_doc(doc: Any) -> Event:
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return cast(Event, data)


class EventService:
    """Service class for event-related operations."""

    @staticmethod
    def create_event(
        db: Client, submission: EventSubmission, creator: Mapping[str, Any]
    ) -> Event:
        """Validate and store a new event.

        Only group admins may create events; that is checked by the caller.
        """
        submission.validate()
        event_ref = db.collection(EVENTS_COLLECTION).document()
        event_data = submission.to_document(creator["uid"], creator.get("email"))
        event_ref.set(event_data)
        return cast(Event, {**event_data, "id": event_ref.id})

    @staticmethod
    def get_event(db: Client, event_id: str) -> Event:
        """Fetch an event or raise ``NotFoundError``."""
        doc = cast(
            "DocumentSnapshot", db.collection(EVENTS_COLLECTION).document(event_id).get()
        )
        if not doc.exists:
            raise NotFoundError("Event not found.")
        return _event_from_doc(doc)

    @staticmethod
    def get_group_events(db: Client, group_id: str) -> list[Event]:
        """Fetch the events of one group."""
        query = db.collection(EVENTS_COLLECTION).where(
            filter=firestore.FieldFilter("groupId", "==", group_id)
        )
        return [_event_from_doc(doc) for doc in query.stream()]

    @staticmethod
    def split_current_and_past(
        events: list[Event], now: datetime.datetime | None = None
    ) -> tuple[list[Event], list[Event]]:
        """Split events into upcoming (from today on, soonest first) and past (latest first)."""
        now = now or datetime.datetime.now(datetime.timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        epoch = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)

        current = []
        past = []
        for event in events:
            date = as_datetime(event.get("date"))
            if date is not None and date >= today:
                current.append(event)
            else:
                past.append(event)

        current.sort(key=lambda e: as_datetime(e.get("date")) or epoch)
        past.sort(key=lambda e: as_datetime(e.get("date")) or epoch, reverse=True)
        return current, past

    @staticmethod
    def get_signup_count(db: Client, event_id: str) -> int:
        """Count an event's signups with a fresh server-side aggregation."""
        query = db.collection(EVENT_SIGNUPS_COLLECTION).where(
            filter=firestore.FieldFilter("eventId", "==", event_id)
        )
        return int(query.count().get()[0][0].value)

    @staticmethod
    def sign_up_for_event(
        db: Client, event: Mapping[str, Any], user: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Sign a user up for an event if it has room.

        The count is re-read before writing, but the read and the write are
        not one atomic step: two users racing for the last place can both get
        in. The signup id is ``{eventId}_{userId}``, so signing up again
        never creates a second document.

        Returns ``{"signup", "currentSignups", "alreadySignedUp"}`` where
        ``currentSignups`` includes this signup.
        """
        if not user or not user.get("uid"):
            raise UnauthenticatedError()

        uid = user["uid"]
        event_id = event["id"]
        signup_ref = db.collection(EVENT_SIGNUPS_COLLECTION).document(
            signup_id(event_id, uid)
        )
        current_signups = EventService.get_signup_count(db, event_id)

        existing = cast("DocumentSnapshot", signup_ref.get())
        if existing.exists:
            return {
                "signup": {**(existing.to_dict() or {}), "id": existing.id},
                "currentSignups": current_signups,
                "alreadySignedUp": True,
            }

        max_participants = int(event.get("maxParticipants") or 0)
        if max_participants > 0 and current_signups >= max_participants:
            raise EventFullError()

        signup = {
            "eventId": event_id,
            "userId": uid,
            "userName": user.get("fullName") or DEFAULT_VOLUNTEER_NAME,
            "userEmail": user.get("email"),
            "eventName": event.get("title"),
            "signedUpAt": firestore.SERVER_TIMESTAMP,
        }
        signup_ref.set(signup)
        return {
            "signup": cast(EventSignup, {**signup, "id": signup_ref.id}),
            "currentSignups": current_signups + 1,
            "alreadySignedUp": False,
        }

    @staticmethod
    def remove_signup(db: Client, event_id: str, user_id: str) -> dict[str, int]:
        """Delete a user's signup(s) for an event in one batch."""
        query = (
            db.collection(EVENT_SIGNUPS_COLLECTION)
            .where(filter=firestore.FieldFilter("eventId", "==", event_id))
            .where(filter=firestore.FieldFilter("userId", "==", user_id))
        )
        docs = list(query.stream())
        if not docs:
            raise NotFoundError("Signup not found. Could not remove.")

        batch = db.batch()
        for doc in docs:
            batch.delete(doc.reference)
        batch.commit()
        return {
            "removed": len(docs),
            "currentSignups": EventService.get_signup_count(db, event_id),
        }

    @staticmethod
    def delete_event_and_signups(db: Client, event_id: str) -> dict[str, int]:
        """Delete an event and all of its signups in one atomic batch."""
        signups = (
            db.collection(EVENT_SIGNUPS_COLLECTION)
            .where(filter=firestore.FieldFilter("eventId", "==", event_id))
            .stream()
        )
        batch = db.batch()
        deleted = 0
        for doc in signups:
            batch.delete(doc.reference)
            deleted += 1
        batch.delete(db.collection(EVENTS_COLLECTION).document(event_id))
        batch.commit()
        return {"deletedSignups": deleted}

    @staticmethod
    def get_user_signup_event_ids(db: Client, user_id: str) -> list[str]:
        """Return the ids of the events a user has signed up for."""
        query = db.collection(EVENT_SIGNUPS_COLLECTION).where(
            filter=firestore.FieldFilter("userId", "==", user_id)
        )
        return [(doc.to_dict() or {}).get("eventId") for doc in query.stream()]

    @staticmethod
    def get_visible_events(db: Client, user_id: str | None) -> list[Event]:
        """Fetch events of public groups and of the user's own groups.

        Each event carries its ``groupName`` and ``currentSignups``.
        """
        public_groups = (
            db.collection(GROUPS_COLLECTION)
            .where(filter=firestore.FieldFilter("privacy", "==", PRIVACY_PUBLIC))
            .stream()
        )
        group_names = {
            doc.id: (doc.to_dict() or {}).get("name") for doc in public_groups
        }
        visible_group_ids = set(group_names)

        if user_id:
            memberships = (
                db.collection(GROUP_MEMBERS_COLLECTION)
                .where(filter=firestore.FieldFilter("userId", "==", user_id))
                .stream()
            )
            for doc in memberships:
                group_id = (doc.to_dict() or {}).get("groupId")
                if group_id:
                    visible_group_ids.add(group_id)

        if not visible_group_ids:
            return []

        events = []
        for chunk in chunked(sorted(visible_group_ids), FIRESTORE_IN_QUERY_LIMIT):
            query = db.collection(EVENTS_COLLECTION).where(
                filter=firestore.FieldFilter("groupId", "in", list(chunk))
            )
            events.extend(_event_from_doc(doc) for doc in query.stream())

        for event in events:
            group_id = event.get("groupId")
            if group_id not in group_names:
                group_doc = db.collection(GROUPS_COLLECTION).document(group_id).get()
                group_names[group_id] = (
                    (group_doc.to_dict() or {}).get("name") if group_doc.exists else None
                )
            event["groupName"] = group_names.get(group_id) or UNKNOWN_GROUP_NAME
            event["currentSignups"] = EventService.get_signup_count(db, event["id"])
        return events

    @staticmethod
    def get_signed_up_events(db: Client, user_id: str) -> list[dict[str, Any]]:
        """Fetch the events a user is signed up for, with when they signed up."""
        signups = (
            db.collection(EVENT_SIGNUPS_COLLECTION)
            .where(filter=firestore.FieldFilter("userId", "==", user_id))
            .stream()
        )
        results = []
        for signup_doc in signups:
            signup_data = signup_doc.to_dict() or {}
            event_id = signup_data.get("eventId")
            if not event_id:
                continue
            event_doc = db.collection(EVENTS_COLLECTION).document(event_id).get()
            if not event_doc.exists:
                continue
            event = _event_from_doc(event_doc)
            results.append(
                {
                    "id": event["id"],
                    "title": event.get("title"),
                    "date": event.get("date"),
                    "location": event.get("location"),
                    "groupId": event.get("groupId"),
                    "signedUpAt": signup_data.get("signedUpAt"),
                }
            )
        return results

    @staticmethod
    def get_created_events(db: Client, user_id: str) -> list[Event]:
        """Fetch the events a user created, with their signup counts."""
        query = db.collection(EVENTS_COLLECTION).where(
            filter=firestore.FieldFilter("creatorId", "==", user_id)
        )
        events = []
        for doc in query.stream():
            event = _event_from_doc(doc)
            event.setdefault("description", "No description.")
            event["maxParticipants"] = event.get("maxParticipants") or 0
            event["currentSignups"] = EventService.get_signup_count(db, event["id"])
            events.append(event)
        return events

    @staticmethod
    def get_event_signups(
        db: Client, event_id: str, user_id: str
    ) -> tuple[Event, list[EventSignup]]:
        """Fetch an event's signups. Only the event's creator may see them."""
        event = EventService.get_event(db, event_id)
        if event.get("creatorId") != user_id:
            raise PermissionDeniedError(
                "You are not authorized to view signups for this event."
            )
        query = db.collection(EVENT_SIGNUPS_COLLECTION).where(
            filter=firestore.FieldFilter("eventId", "==", event_id)
        )
        signups = []
        for doc in query.stream():
            data = doc.to_dict() or {}
            data["id"] = doc.id
            signups.append(cast(EventSignup, data))
        return event, signups
