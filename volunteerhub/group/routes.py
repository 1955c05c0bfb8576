"""Routes for the group blueprint."""

from firebase_admin import firestore
from flask import current_app, g, jsonify, request

from volunteerhub.auth.decorators import login_required
from volunteerhub.constants import PRIVACY_PUBLIC, ROLE_ADMIN
from volunteerhub.errors import NotFoundError, PermissionDeniedError, ValidationError
from volunteerhub.utils import to_json_safe

from . import bp
from .forms import ApproveRequestForm, GroupForm
from .membership import MembershipService
from .services import GroupService


def _require_admin(db, group_id):
    """Raise unless the signed-in user is an admin of the group."""
    membership = MembershipService.get_membership(db, group_id, g.user.uid)
    if not membership or membership.get("role") != ROLE_ADMIN:
        raise PermissionDeniedError("Only group admins can do that.")
    return membership


def _success(message=None, **data):
    body = {"status": "success"}
    if message:
        body["message"] = message
    body.update(to_json_safe(data))
    return jsonify(body)


@bp.route("/", methods=["GET"])
def view_groups():
    """List every group."""
    db = firestore.client()
    return _success(groups=GroupService.get_all_groups(db))


@bp.route("/search", methods=["GET"])
def search_groups():
    """Find groups by name prefix."""
    name = request.args.get("name", "").strip()
    if not name:
        raise ValidationError("Please enter a group name to search for.")
    db = firestore.client()
    return _success(groups=GroupService.search_groups(db, name))


@bp.route("/mine", methods=["GET"])
@login_required
def my_groups():
    """List the groups the signed-in user belongs to."""
    db = firestore.client()
    return _success(groups=GroupService.get_user_groups(db, g.user.uid))


@bp.route("/create", methods=["POST"])
@login_required
def create_group():
    """Create a group with the signed-in user as its admin."""
    form = GroupForm()
    if not form.validate_on_submit():
        raise ValidationError(
            "; ".join(
                f"{field}: {', '.join(errors)}" for field, errors in form.errors.items()
            )
        )
    db = firestore.client()
    result = GroupService.create_group(
        db,
        form.name.data,
        form.description.data,
        form.privacy.data or PRIVACY_PUBLIC,
        g.user,
    )
    current_app.logger.info(
        f"User {g.user.uid} created group {result['group']['id']}"
    )
    return _success("Group created successfully!", **result), 201


@bp.route("/<string:group_id>", methods=["GET"])
def view_group(group_id):
    """Show a group as the current viewer is allowed to see it."""
    db = firestore.client()
    details = GroupService.get_group_details(db, group_id, g.get("user"))
    return _success(**details)


@bp.route("/<string:group_id>/join", methods=["POST"])
@login_required
def join_group(group_id):
    """Join a public group or request to join a private one."""
    db = firestore.client()
    group = GroupService.get_group(db, group_id)
    result = MembershipService.request_to_join_group(
        db, group_id, group.get("privacy", PRIVACY_PUBLIC), g.user
    )
    if result["status"] == "joined":
        message = f"You have joined {group.get('name')}!"
    else:
        message = "Your request to join has been sent."
    return _success(
        message,
        joinStatus=result["status"],
        membership=result.get("membership"),
        request=result.get("request"),
    )


@bp.route("/<string:group_id>/leave", methods=["POST"])
@login_required
def leave_group(group_id):
    """Leave a group; the last member leaving deletes it."""
    db = firestore.client()
    result = MembershipService.leave_group(db, group_id, g.user)
    message = result.pop("message", None) or "You have left the group."
    return _success(message, **result)


@bp.route("/<string:group_id>/requests/<string:user_id>/approve", methods=["POST"])
@login_required
def approve_request(group_id, user_id):
    """Approve a pending join request."""
    db = firestore.client()
    _require_admin(db, group_id)

    pending = next(
        (
            r
            for r in MembershipService.get_join_requests(db, group_id)
            if r.get("userId") == user_id
        ),
        None,
    )
    if pending is None:
        raise NotFoundError("Join request not found.")

    form = ApproveRequestForm()
    name = (form.name.data or "").strip() or pending.get("userName") or user_id

    membership = MembershipService.approve_join_request(
        db, group_id, {"id": user_id, "name": name}
    )
    return _success(f"{name} has been approved.", membership=membership)


@bp.route("/<string:group_id>/requests/<string:user_id>/deny", methods=["POST"])
@login_required
def deny_request(group_id, user_id):
    """Deny a pending join request."""
    db = firestore.client()
    _require_admin(db, group_id)
    MembershipService.deny_join_request(db, group_id, user_id)
    return _success("Request denied.")


@bp.route("/<string:group_id>/members/<string:user_id>/promote", methods=["POST"])
@login_required
def promote_member(group_id, user_id):
    """Make a member an admin."""
    db = firestore.client()
    _require_admin(db, group_id)
    MembershipService.promote_to_admin(db, group_id, user_id)
    return _success("Member promoted to admin.")


@bp.route("/<string:group_id>/members/<string:user_id>/kick", methods=["POST"])
@login_required
def kick_member(group_id, user_id):
    """Remove another member from the group."""
    db = firestore.client()
    _require_admin(db, group_id)
    if user_id == g.user.uid:
        raise ValidationError("You cannot kick yourself. Leave the group instead.")
    MembershipService.kick_member(db, group_id, user_id)
    return _success("Member removed.")
