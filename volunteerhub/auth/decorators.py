"""Decorators for the auth blueprint."""

from functools import wraps

from flask import g

from volunteerhub.errors import UnauthenticatedError


def login_required(f=None):
    """Reject the request with ``unauthenticated`` if no user is signed in.

    Usage:
    @login_required
    def protected_view():
        ...
    """

    def decorator(func):
        @wraps(func)
        def decorated_function(*args, **kwargs):
            if g.get("user") is None:
                raise UnauthenticatedError()
            return func(*args, **kwargs)

        return decorated_function

    if f:
        return decorator(f)
    return decorator
