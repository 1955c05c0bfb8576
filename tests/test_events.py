"""Tests for EventService."""

from __future__ import annotations

import datetime
import unittest
from unittest.mock import MagicMock

from volunteerhub.constants import EVENT_SIGNUPS_COLLECTION, EVENTS_COLLECTION
from volunteerhub.errors import (
    EventFullError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from volunteerhub.event.models import EventSubmission
from volunteerhub.event.services import EventService

from tests.mock_utils import FirestoreTestCase, docs

UTC = datetime.timezone.utc


def volunteer(uid, full_name=None):
    return {"uid": uid, "fullName": full_name, "email": f"{uid}@example.com"}


class TestEventService(FirestoreTestCase):
    def add_event(self, event_id="event1", max_participants=2, **fields):
        data = {
            "title": "Beach Cleanup",
            "date": datetime.datetime(2030, 5, 1, 9, 0, tzinfo=UTC),
            "location": "North Beach",
            "description": "Bring gloves.",
            "maxParticipants": max_participants,
            "creatorId": "admin",
            "groupId": "group1",
        }
        data.update(fields)
        self.db.collection(EVENTS_COLLECTION).document(event_id).set(data)
        return EventService.get_event(self.db, event_id)

    def signups_for(self, event_id="event1"):
        return {
            doc_id: data
            for doc_id, data in docs(self.db, EVENT_SIGNUPS_COLLECTION).items()
            if data.get("eventId") == event_id
        }

    def test_create_event(self) -> None:
        submission = EventSubmission(
            group_id="group1",
            title="  Food Drive ",
            date=datetime.datetime(2030, 1, 2, 10, 0),
            location="Hall",
            description="Sort donations.",
            max_participants=5,
        )

        event = EventService.create_event(
            self.db, submission, {"uid": "admin", "email": "admin@example.com"}
        )

        stored = docs(self.db, EVENTS_COLLECTION)[event["id"]]
        self.assertEqual(stored["title"], "Food Drive")
        self.assertEqual(stored["creatorId"], "admin")
        self.assertEqual(stored["creatorEmail"], "admin@example.com")
        self.assertEqual(stored["maxParticipants"], 5)
        self.assertEqual(stored["date"].tzinfo, UTC)

    def test_create_event_rejects_bad_capacity(self) -> None:
        submission = EventSubmission(
            group_id="group1",
            title="Food Drive",
            date=datetime.datetime(2030, 1, 2, 10, 0),
            location="Hall",
            description="Sort donations.",
            max_participants=0,
        )

        with self.assertRaises(ValidationError):
            EventService.create_event(self.db, submission, {"uid": "admin"})
        self.assertEqual(docs(self.db, EVENTS_COLLECTION), {})

    def test_create_event_rejects_blank_title(self) -> None:
        submission = EventSubmission(
            group_id="group1",
            title="   ",
            date=datetime.datetime(2030, 1, 2, 10, 0),
            location="Hall",
            description="Sort donations.",
            max_participants=3,
        )

        with self.assertRaises(ValidationError):
            submission.validate()

    def test_get_missing_event_raises(self) -> None:
        with self.assertRaises(NotFoundError):
            EventService.get_event(self.db, "nope")

    def test_sign_up_writes_keyed_signup(self) -> None:
        event = self.add_event()

        result = EventService.sign_up_for_event(
            self.db, event, volunteer("u1", "Una Volunteer")
        )

        self.assertEqual(result["currentSignups"], 1)
        self.assertFalse(result["alreadySignedUp"])
        signups = self.signups_for()
        self.assertEqual(list(signups), ["event1_u1"])
        self.assertEqual(signups["event1_u1"]["userName"], "Una Volunteer")
        self.assertEqual(signups["event1_u1"]["eventName"], "Beach Cleanup")

    def test_sign_up_without_name_is_anonymous(self) -> None:
        event = self.add_event()

        result = EventService.sign_up_for_event(self.db, event, volunteer("u1"))

        self.assertEqual(result["signup"]["userName"], "Anonymous Volunteer")

    def test_sign_up_twice_keeps_one_document(self) -> None:
        event = self.add_event(max_participants=5)

        EventService.sign_up_for_event(self.db, event, volunteer("u1"))
        result = EventService.sign_up_for_event(self.db, event, volunteer("u1"))

        self.assertTrue(result["alreadySignedUp"])
        self.assertEqual(result["currentSignups"], 1)
        self.assertEqual(len(self.signups_for()), 1)

    def test_re_signup_on_full_event_is_not_rejected(self) -> None:
        event = self.add_event(max_participants=1)
        EventService.sign_up_for_event(self.db, event, volunteer("u1"))

        result = EventService.sign_up_for_event(self.db, event, volunteer("u1"))

        self.assertTrue(result["alreadySignedUp"])

    def test_capacity_admits_exactly_max_participants(self) -> None:
        capacity = 3
        event = self.add_event(max_participants=capacity)
        admitted = 0
        rejected = 0

        for i in range(5):
            try:
                EventService.sign_up_for_event(self.db, event, volunteer(f"u{i}"))
                admitted += 1
            except EventFullError:
                rejected += 1

        self.assertEqual(admitted, capacity)
        self.assertEqual(rejected, 2)
        self.assertEqual(len(self.signups_for()), capacity)
        self.assertEqual(EventService.get_signup_count(self.db, "event1"), capacity)

    def test_full_event_error_code(self) -> None:
        event = self.add_event(max_participants=1)
        EventService.sign_up_for_event(self.db, event, volunteer("u1"))

        with self.assertRaises(EventFullError) as ctx:
            EventService.sign_up_for_event(self.db, event, volunteer("u2"))

        self.assertEqual(ctx.exception.code, "full")
        self.assertEqual(ctx.exception.message, "Sorry, this event is already full.")

    def test_remove_signup(self) -> None:
        event = self.add_event()
        EventService.sign_up_for_event(self.db, event, volunteer("u1"))
        EventService.sign_up_for_event(self.db, event, volunteer("u2"))

        result = EventService.remove_signup(self.db, "event1", "u1")

        self.assertEqual(result["removed"], 1)
        self.assertEqual(result["currentSignups"], 1)
        self.assertEqual(list(self.signups_for()), ["event1_u2"])

    def test_remove_missing_signup_raises(self) -> None:
        self.add_event()

        with self.assertRaises(NotFoundError) as ctx:
            EventService.remove_signup(self.db, "event1", "u1")

        self.assertEqual(ctx.exception.message, "Signup not found. Could not remove.")

    def test_delete_event_and_signups(self) -> None:
        event = self.add_event()
        other = self.add_event("event2")
        EventService.sign_up_for_event(self.db, event, volunteer("u1"))
        EventService.sign_up_for_event(self.db, other, volunteer("u1"))

        result = EventService.delete_event_and_signups(self.db, "event1")

        self.assertEqual(result["deletedSignups"], 1)
        self.assertEqual(list(docs(self.db, EVENTS_COLLECTION)), ["event2"])
        self.assertEqual(list(docs(self.db, EVENT_SIGNUPS_COLLECTION)), ["event2_u1"])

    def test_delete_event_failed_commit_removes_nothing(self) -> None:
        event = self.add_event()
        EventService.sign_up_for_event(self.db, event, volunteer("u1"))
        batch = MagicMock()
        batch.commit.side_effect = RuntimeError("commit failed")
        self.db.batch = MagicMock(return_value=batch)

        with self.assertRaises(RuntimeError):
            EventService.delete_event_and_signups(self.db, "event1")

        self.assertIn("event1", docs(self.db, EVENTS_COLLECTION))
        self.assertEqual(len(self.signups_for()), 1)

    def test_split_current_and_past(self) -> None:
        now = datetime.datetime(2030, 5, 10, 15, 0, tzinfo=UTC)
        events = [
            {"id": "later", "date": datetime.datetime(2030, 6, 1, tzinfo=UTC)},
            {"id": "today", "date": datetime.datetime(2030, 5, 10, 8, 0, tzinfo=UTC)},
            {"id": "old", "date": datetime.datetime(2030, 1, 1, tzinfo=UTC)},
            {"id": "older", "date": datetime.datetime(2029, 1, 1, tzinfo=UTC)},
            {"id": "undated"},
        ]

        current, past = EventService.split_current_and_past(events, now=now)

        self.assertEqual([e["id"] for e in current], ["today", "later"])
        self.assertEqual([e["id"] for e in past], ["old", "older", "undated"])

    def test_visible_events_cover_public_and_own_groups(self) -> None:
        groups = self.db.collection("groups")
        groups.document("pub").set({"name": "Public Group", "privacy": "public"})
        groups.document("priv").set({"name": "Private Group", "privacy": "private"})
        groups.document("hidden").set({"name": "Hidden Group", "privacy": "private"})
        self.db.collection("group_members").document("priv_u1").set(
            {"groupId": "priv", "userId": "u1", "role": "member"}
        )
        self.add_event("e_pub", groupId="pub")
        self.add_event("e_priv", groupId="priv")
        self.add_event("e_hidden", groupId="hidden")
        EventService.sign_up_for_event(
            self.db, EventService.get_event(self.db, "e_pub"), volunteer("u2")
        )

        events = {e["id"]: e for e in EventService.get_visible_events(self.db, "u1")}

        self.assertEqual(set(events), {"e_pub", "e_priv"})
        self.assertEqual(events["e_pub"]["groupName"], "Public Group")
        self.assertEqual(events["e_priv"]["groupName"], "Private Group")
        self.assertEqual(events["e_pub"]["currentSignups"], 1)
        self.assertEqual(events["e_priv"]["currentSignups"], 0)

    def test_visible_events_for_anonymous_viewer(self) -> None:
        self.db.collection("groups").document("priv").set(
            {"name": "Private Group", "privacy": "private"}
        )
        self.add_event("e_priv", groupId="priv")

        self.assertEqual(EventService.get_visible_events(self.db, None), [])

    def test_signed_up_and_created_events(self) -> None:
        event = self.add_event(creatorId="u9")
        EventService.sign_up_for_event(self.db, event, volunteer("u1"))

        signed_up = EventService.get_signed_up_events(self.db, "u1")
        created = EventService.get_created_events(self.db, "u9")

        self.assertEqual([e["id"] for e in signed_up], ["event1"])
        self.assertEqual(EventService.get_user_signup_event_ids(self.db, "u1"), ["event1"])
        self.assertEqual(len(created), 1)
        self.assertEqual(created[0]["currentSignups"], 1)

    def test_event_signups_visible_to_creator_only(self) -> None:
        event = self.add_event()
        EventService.sign_up_for_event(self.db, event, volunteer("u1"))

        _, signups = EventService.get_event_signups(self.db, "event1", "admin")
        self.assertEqual([s["userId"] for s in signups], ["u1"])

        with self.assertRaises(PermissionDeniedError):
            EventService.get_event_signups(self.db, "event1", "u1")


if __name__ == "__main__":
    unittest.main()
