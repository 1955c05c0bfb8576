"""Deterministic document ids for keyed collections."""


def membership_id(group_id: str, user_id: str) -> str:
    """Return the id shared by a user's membership and join request in a group."""
    return f"{group_id}_{user_id}"


def signup_id(event_id: str, user_id: str) -> str:
    """Return the id of a user's signup for an event."""
    return f"{event_id}_{user_id}"
