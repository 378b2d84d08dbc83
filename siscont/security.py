from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from flask import abort
from flask_login import current_user

from .models.core import UserRole

F = TypeVar("F", bound=Callable)

# Roles allowed to change the company data, list users and run Distribute.
MANAGERS = (UserRole.ADMIN, UserRole.EMPRESA)


def require_roles(*roles: str) -> Callable[[F], F]:
    """Decorator for role checks: 401 without a session, 403 for any other role."""

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if roles and not any(current_user.has_role(r) for r in roles):
                abort(403)
            return fn(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
