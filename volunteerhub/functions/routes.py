"""HTTP endpoints for callable functions.

Requests and responses follow the Firebase callable protocol: the argument is
posted as ``{"data": ...}``, a result comes back as ``{"result": ...}`` and a
failure as ``{"error": {"status": ..., "message": ...}}``. The caller is
identified by the Firebase ID token in the ``Authorization`` header.
"""

from firebase_admin import firestore
from flask import current_app, jsonify, request

from volunteerhub.auth.session import SessionManager
from volunteerhub.errors import AppError, InternalError
from volunteerhub.extensions import csrf

from . import bp
from .cascade import delete_group_on_last_leave


def _callable_error(error):
    """Render an application error in the callable wire format."""
    body = {"error": {"status": error.callable_status, "message": error.message}}
    return jsonify(body), error.status_code


@bp.route("/deletegrouponlastleave", methods=["POST"])
@csrf.exempt
def deletegrouponlastleave():
    """Delete a group when the caller, its last member, leaves."""
    try:
        principal = SessionManager.principal_from_request(request)
        payload = request.get_json(silent=True)
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            data = {}
        db = firestore.client()
        result = delete_group_on_last_leave(db, data.get("groupId"), principal)
    except AppError as e:
        current_app.logger.warning(f"deletegrouponlastleave failed: {e.message}")
        return _callable_error(e)
    except Exception as e:
        current_app.logger.error(f"deletegrouponlastleave crashed: {e}")
        return _callable_error(InternalError())
    return jsonify({"result": result})
