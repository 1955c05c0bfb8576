"""Utility functions for the application."""

from __future__ import annotations

import datetime
from collections.abc import Iterator, Sequence
from typing import Any, TypeVar

from google.cloud.firestore_v1.transforms import Sentinel

T = TypeVar("T")


def to_json_safe(value: Any) -> Any:
    """Convert Firestore values into something ``jsonify`` accepts.

    Datetimes (including Firestore timestamps) become ISO strings and
    server-side sentinels such as ``SERVER_TIMESTAMP``, which have no value
    until the write is applied, become ``None``.
    """
    if isinstance(value, Sentinel):
        return None
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    return value


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield successive slices of ``items`` no longer than ``size``."""
    for i in range(0, len(items), size):
        yield items[i : i + size]


def as_datetime(value: Any) -> datetime.datetime | None:
    """Return a timezone-aware datetime for a stored date field, if it has one."""
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(
            value, datetime.time.min, tzinfo=datetime.timezone.utc
        )
    return None
