"""HTTP error taxonomy for the auth service.

Each error subclasses the matching werkzeug exception so the JSON error
handler registered in ``app.py`` renders all of them the same way.
"""

from __future__ import annotations

from werkzeug.exceptions import (
    BadRequest,
    Conflict,
    Forbidden,
    InternalServerError,
    ServiceUnavailable,
    Unauthorized,
)


class ValidationError(BadRequest):
    """Missing or malformed input."""


class ConflictError(Conflict):
    """The resource already exists (duplicate email)."""


class UnauthorizedError(Unauthorized):
    """Bad credentials or no active session."""


class ForbiddenError(Forbidden):
    """Authenticated, but the role does not allow the operation."""


class StoreError(InternalServerError):
    """A collaborator (database) failed; never carries internal detail."""

    description = "Server error"


class ServiceUnavailableError(ServiceUnavailable):
    """The credential store has not finished bootstrapping."""

    description = "Service is starting, try again shortly"


__all__ = [
    "ValidationError",
    "ConflictError",
    "UnauthorizedError",
    "ForbiddenError",
    "StoreError",
    "ServiceUnavailableError",
]
