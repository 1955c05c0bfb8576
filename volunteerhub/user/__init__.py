"""User profiles and the signed-in principal."""

from .models import User, UserSession
from .services import UserService

__all__ = ["User", "UserService", "UserSession"]
