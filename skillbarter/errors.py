"""Error hierarchy for every failure a Skill Barter operation can report.

Each error carries a stable ``code`` for clients, the HTTP status the API maps
it to, and a short message that is safe to show to the user as-is.
"""
from typing import Any, Optional

from skillbarter.constants import (
    ERR_CONFLICT,
    ERR_FORBIDDEN,
    ERR_INVALID_STATUS,
    ERR_NOT_FOUND,
    ERR_TRANSIENT,
    ERR_UNAUTHENTICATED,
    ERR_VALIDATION,
)


class BarterError(Exception):
    """Base exception for all Skill Barter errors."""

    code: str = "BARTER_ERROR"
    http_status: int = 500
    retryable: bool = False

    def __init__(self, message: str, code: Optional[str] = None, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details

    def to_response(self, request_id: str = "") -> dict[str, Any]:
        """Convert to the structured error envelope returned by the API."""
        detail: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "request_id": request_id,
        }
        if self.details:
            detail["details"] = self.details
        return {"detail": detail}


class ValidationError(BarterError):
    """Malformed input: field length, missing required field, invalid enum."""

    code = ERR_VALIDATION
    http_status = 422


class AuthenticationError(BarterError):
    """No valid session."""

    code = ERR_UNAUTHENTICATED
    http_status = 401

    def __init__(self, message: str = "You must be signed in to do that.", **details: Any) -> None:
        super().__init__(message, **details)


class AuthorizationError(BarterError):
    """Authenticated, but not permitted to act on this record."""

    code = ERR_FORBIDDEN
    http_status = 403


class ConflictError(BarterError):
    code = ERR_CONFLICT
    http_status = 409


class InvalidStateError(BarterError):
    """Transition attempted from a status that does not allow it."""

    code = ERR_INVALID_STATUS
    http_status = 400


class NotFoundError(BarterError):
    code = ERR_NOT_FOUND
    http_status = 404


class TransientError(BarterError):
    """Storage or network unavailable. Safe to retry idempotent reads."""

    code = ERR_TRANSIENT
    http_status = 503
    retryable = True
