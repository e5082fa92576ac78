"""
Error taxonomy shared by the repository, service, API and clients.

Every error carries a stable error_code so the API can render it
and the HTTP client can map it back to the same exception type.
"""

from __future__ import annotations
from typing import Any


class DrillError(Exception):
    """Base class for all drill errors."""
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConflictError(DrillError):
    """A session already exists, or an update is older than the stored one."""
    error_code = "SESSION_CONFLICT"


class NotFoundError(DrillError):
    """Missing session, missing unit, or a selection that yields no words."""
    error_code = "SESSION_NOT_FOUND"


class UnitNotFoundError(NotFoundError):
    error_code = "UNIT_NOT_FOUND"


class ValidationError(DrillError):
    """Payload breaks a session invariant or an upload has no usable rows."""
    error_code = "VALIDATION_ERROR"


class TransientIOError(DrillError):
    """Storage or transport unreachable. Callers may retry later."""
    error_code = "TRANSIENT_IO_ERROR"


class AuthenticationError(DrillError):
    """Missing or unknown bearer token."""
    error_code = "UNAUTHORIZED"
