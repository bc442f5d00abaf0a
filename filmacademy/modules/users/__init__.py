"""User domain package exports."""

from .models import User, UserRole

__all__ = ["User", "UserRole", "UserService"]


def __getattr__(name: str):
    if name == "UserService":
        from .service import UserService as _UserService

        return _UserService
    raise AttributeError(f"module 'filmacademy.modules.users' has no attribute {name!r}")
