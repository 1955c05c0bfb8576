"""Callable functions: trusted procedures invoked by the client over HTTP."""

from flask import Blueprint

bp = Blueprint("functions", __name__, url_prefix="/functions")

from . import routes  # noqa: E402

__all__ = ["routes"]
