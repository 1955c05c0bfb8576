"""Core data types for the volunteerhub application."""

from typing import Any, TypedDict


class _FirestoreDocumentBase(TypedDict):
    id: str


class FirestoreDocument(_FirestoreDocumentBase, total=False):
    """A stored document together with its id."""

    createdAt: Any
