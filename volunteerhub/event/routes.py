"""Routes for the event blueprint."""

from firebase_admin import firestore
from flask import current_app, g, jsonify

from volunteerhub.auth.decorators import login_required
from volunteerhub.constants import ROLE_ADMIN
from volunteerhub.errors import PermissionDeniedError, ValidationError
from volunteerhub.group.membership import MembershipService
from volunteerhub.utils import to_json_safe

from . import bp
from .forms import EventForm
from .models import EventSubmission
from .services import EventService


def _is_group_admin(db, group_id, user_id):
    membership = MembershipService.get_membership(db, group_id, user_id)
    return bool(membership) and membership.get("role") == ROLE_ADMIN


def _success(message=None, **data):
    body = {"status": "success"}
    if message:
        body["message"] = message
    body.update(to_json_safe(data))
    return jsonify(body)


@bp.route("/", methods=["GET"])
def view_events():
    """List events from public groups and the viewer's own groups."""
    db = firestore.client()
    user = g.get("user")
    events = EventService.get_visible_events(db, user.uid if user else None)
    signed_up = (
        set(EventService.get_user_signup_event_ids(db, user.uid)) if user else set()
    )
    for event in events:
        event["isSignedUp"] = event["id"] in signed_up
    return _success(events=events)


@bp.route("/create", methods=["POST"])
@login_required
def create_event():
    """Create an event in a group the signed-in user administers."""
    form = EventForm()
    if not form.validate_on_submit():
        raise ValidationError(
            "; ".join(
                f"{field}: {', '.join(errors)}" for field, errors in form.errors.items()
            )
        )

    db = firestore.client()
    group_id = form.group_id.data
    if not _is_group_admin(db, group_id, g.user.uid):
        raise PermissionDeniedError("Only group admins can create events.")

    submission = EventSubmission(
        group_id=group_id,
        title=form.title.data,
        date=form.date.data,
        location=form.location.data,
        description=form.description.data,
        max_participants=form.max_participants.data,
    )
    event = EventService.create_event(db, submission, g.user)
    current_app.logger.info(f"User {g.user.uid} created event {event['id']}")
    return _success("Event created successfully!", event=event), 201


@bp.route("/mine", methods=["GET"])
@login_required
def my_signups():
    """List the events the signed-in user has signed up for."""
    db = firestore.client()
    return _success(events=EventService.get_signed_up_events(db, g.user.uid))


@bp.route("/created", methods=["GET"])
@login_required
def my_created_events():
    """List the events the signed-in user created."""
    db = firestore.client()
    return _success(events=EventService.get_created_events(db, g.user.uid))


@bp.route("/<string:event_id>/signup", methods=["POST"])
@login_required
def signup(event_id):
    """Sign the signed-in user up for an event."""
    db = firestore.client()
    event = EventService.get_event(db, event_id)
    result = EventService.sign_up_for_event(db, event, g.user)
    if result["alreadySignedUp"]:
        message = "You are already signed up for this event."
    else:
        message = "Successfully signed up!"
    return _success(message, **result)


@bp.route("/<string:event_id>/leave", methods=["POST"])
@login_required
def leave_event(event_id):
    """Remove the signed-in user's signup for an event."""
    db = firestore.client()
    result = EventService.remove_signup(db, event_id, g.user.uid)
    return _success("You have left the event.", **result)


@bp.route("/<string:event_id>/delete", methods=["POST"])
@login_required
def delete_event(event_id):
    """Delete an event and its signups."""
    db = firestore.client()
    event = EventService.get_event(db, event_id)
    is_creator = event.get("creatorId") == g.user.uid
    if not is_creator and not _is_group_admin(db, event.get("groupId"), g.user.uid):
        raise PermissionDeniedError("Only group admins can delete events.")

    result = EventService.delete_event_and_signups(db, event_id)
    current_app.logger.info(
        f"User {g.user.uid} deleted event {event_id} "
        f"and {result['deletedSignups']} signup(s)"
    )
    return _success("Event deleted successfully.", **result)


@bp.route("/<string:event_id>/signups", methods=["GET"])
@login_required
def event_signups(event_id):
    """List who signed up for an event. Only its creator may look."""
    db = firestore.client()
    event, signups = EventService.get_event_signups(db, event_id, g.user.uid)
    return _success(event=event, signups=signups)
