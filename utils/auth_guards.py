"""Session-based authentication guards for views."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import session

from utils.errors import ForbiddenError, UnauthorizedError

SESSION_USER_KEY = "user"


def current_identity() -> dict[str, Any] | None:
    """Return the identity snapshot stored at signin, if any."""

    identity = session.get(SESSION_USER_KEY)
    return identity if isinstance(identity, dict) else None


def require_identity() -> dict[str, Any]:
    identity = current_identity()
    if identity is None:
        raise UnauthorizedError("Unauthorized")
    return identity


def require_admin() -> dict[str, Any]:
    identity = require_identity()
    if identity.get("role") != "admin":
        raise ForbiddenError("Forbidden")
    return identity


def login_required(view: Callable) -> Callable:
    """Reject the request with 401 when there is no active session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        require_identity()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view: Callable) -> Callable:
    """401 without a session, 403 for non-admin sessions."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        require_admin()
        return view(*args, **kwargs)

    return wrapper
