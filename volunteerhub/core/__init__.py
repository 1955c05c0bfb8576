"""Core module for the volunteerhub application."""

from .keys import membership_id, signup_id
from .types import FirestoreDocument

__all__ = ["FirestoreDocument", "membership_id", "signup_id"]
