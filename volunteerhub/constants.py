"""Global constants for the volunteerhub application."""

# Collection names
USERS_COLLECTION = "users"
GROUPS_COLLECTION = "groups"
GROUP_MEMBERS_COLLECTION = "group_members"
JOIN_REQUESTS_COLLECTION = "join_requests"
EVENTS_COLLECTION = "events"
EVENT_SIGNUPS_COLLECTION = "event_signups"

# Group privacy
PRIVACY_PUBLIC = "public"
PRIVACY_PRIVATE = "private"
GROUP_PRIVACY_CHOICES = (PRIVACY_PUBLIC, PRIVACY_PRIVATE)

# Member roles
ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"

# Viewer status on a group page
STATUS_PENDING = "pending"
STATUS_NON_MEMBER = "non-member"

# Display name fallbacks
DEFAULT_JOINER_NAME = "A New User"
DEFAULT_CREATOR_NAME = "Group Creator"
DEFAULT_VOLUNTEER_NAME = "Anonymous Volunteer"
UNKNOWN_GROUP_NAME = "Unknown Group"

# Query limits
GROUP_SEARCH_LIMIT = 20
# Firestore "in" filters accept at most 30 values
FIRESTORE_IN_QUERY_LIMIT = 30

LAST_MEMBER_LEAVE_MESSAGE = (
    "You are the last member. Leaving will permanently delete this group "
    "and all its events. Are you sure?"
)
LEAVE_MESSAGE = "Are you sure you want to leave this group?"
