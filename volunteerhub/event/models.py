"""Data models for the event blueprint."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, TypedDict

from firebase_admin import firestore

from volunteerhub.core.types import FirestoreDocument
from volunteerhub.errors import ValidationError
from volunteerhub.utils import as_datetime


class Event(FirestoreDocument, total=False):
    """An event document in Firestore."""

    title: str
    date: Any
    location: str
    description: str
    maxParticipants: int
    creatorId: str
    creatorEmail: str
    groupId: str

    # UI and calculated fields
    groupName: str
    currentSignups: int


class EventSignup(TypedDict, total=False):
    """A signup document, keyed ``{eventId}_{userId}``."""

    id: str
    eventId: str
    userId: str
    userName: str
    userEmail: str | None
    eventName: str
    signedUpAt: Any


@dataclass
class EventSubmission:
    """Dataclass for event creation submission."""

    group_id: str
    title: str
    date: datetime.datetime
    location: str
    description: str
    max_participants: int

    def validate(self) -> None:
        """Raise ``ValidationError`` unless every field is usable."""
        if not self.group_id:
            raise ValidationError("An event must belong to a group.")
        for label, value in (
            ("title", self.title),
            ("location", self.location),
            ("description", self.description),
        ):
            if not value or not str(value).strip():
                raise ValidationError(f"Event {label} is required.")
        if isinstance(self.max_participants, bool) or not isinstance(
            self.max_participants, int
        ):
            raise ValidationError("Max participants must be a whole number.")
        if self.max_participants <= 0:
            raise ValidationError("Max participants must be greater than 0.")
        if as_datetime(self.date) is None:
            raise ValidationError("Invalid date format.")

    def to_document(self, creator_id: str, creator_email: str | None) -> dict[str, Any]:
        """Build the Firestore document for this event."""
        return {
            "title": self.title.strip(),
            "date": as_datetime(self.date),
            "location": self.location.strip(),
            "description": self.description,
            "maxParticipants": self.max_participants,
            "creatorId": creator_id,
            "creatorEmail": creator_email or "",
            "groupId": self.group_id,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
