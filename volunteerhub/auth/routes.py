from firebase_admin import auth, firestore
from flask import current_app, g, jsonify, request
from flask_wtf.csrf import generate_csrf

from volunteerhub.errors import DuplicateResourceError, InternalError, ValidationError
from volunteerhub.extensions import csrf
from volunteerhub.user.services import UserService

from . import bp
from .decorators import login_required
from .forms import ProfileForm, RegisterForm
from .session import SessionManager


def _form_errors(form):
    """Flatten WTForms errors into a single message."""
    return "; ".join(
        f"{field}: {', '.join(messages)}" for field, messages in form.errors.items()
    )


@bp.route("/register", methods=["POST"])
def register():
    """Create a Firebase Auth account and its profile document."""
    form = RegisterForm()
    if not form.validate_on_submit():
        raise ValidationError(_form_errors(form))

    db = firestore.client()
    full_name = form.full_name.data.strip()
    email = form.email.data
    try:
        user_record = auth.create_user(
            email=email, password=form.password.data, display_name=full_name
        )
    except auth.EmailAlreadyExistsError as e:
        raise DuplicateResourceError("Email address is already registered.") from e
    except Exception as e:
        current_app.logger.error(f"Error during registration: {e}")
        raise InternalError("An unexpected error occurred during registration.") from e

    UserService.create_user_profile(db, user_record.uid, full_name, email)
    current_app.logger.info(f"Registered user {user_record.uid}")
    return (
        jsonify(
            {
                "status": "success",
                "message": "Registration successful! Please sign in.",
                "uid": user_record.uid,
            }
        ),
        201,
    )


@bp.route("/session_login", methods=["POST"])
@csrf.exempt
def session_login():
    """
    This endpoint is called from the client-side after a successful Firebase login.
    It receives the ID token, verifies it, and creates a server-side session.
    """
    payload = request.get_json(silent=True) or {}
    db = firestore.client()
    user = SessionManager.start_session(db, payload.get("idToken"))
    return jsonify(
        {
            "status": "success",
            "user": user.to_public_dict(),
            "csrfToken": generate_csrf(),
        }
    )


@bp.route("/logout", methods=["POST"])
def logout():
    """Clear the server-side session."""
    SessionManager.end_session()
    return jsonify({"status": "success", "message": "You have been logged out."})


@bp.route("/me", methods=["GET"])
@login_required
def me():
    """Return the signed-in principal."""
    return jsonify({"status": "success", "user": g.user.to_public_dict()})


@bp.route("/me", methods=["POST"])
@login_required
def update_profile():
    """Update the signed-in user's full name."""
    form = ProfileForm()
    if not form.validate_on_submit():
        raise ValidationError(_form_errors(form))
    db = firestore.client()
    profile = UserService.update_full_name(db, g.user.uid, form.full_name.data)
    return jsonify({"status": "success", "user": profile})
