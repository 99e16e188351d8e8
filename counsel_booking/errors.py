"""Error taxonomy for the booking client.

Every failure reaches the caller as a BookingError subclass carrying a
human-readable message; nothing here is fatal to the process.
"""
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Broad error categories, independent of how the UI shows them."""
    VALIDATION = "validation"
    NETWORK = "network"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    BACKEND = "backend"


class BookingError(Exception):
    """Base class for every error raised by this package."""

    kind = ErrorKind.BACKEND

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self) -> dict:
        """Serialize for UI display or logging."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "status_code": self.status_code,
        }


class ValidationError(BookingError):
    """Input rejected locally, before any network call."""
    kind = ErrorKind.VALIDATION


class NetworkError(BookingError):
    """No usable response from the backend."""
    kind = ErrorKind.NETWORK


class CircuitOpenError(NetworkError):
    """Backend calls are suspended after repeated failures (fail fast)."""
    pass


class BackendError(BookingError):
    """Backend answered with an error status."""
    kind = ErrorKind.BACKEND


class ConflictError(BackendError):
    """Backend refused because the resource state changed (HTTP 409)."""
    kind = ErrorKind.CONFLICT


class NotFoundError(BackendError):
    """Requested resource does not exist (HTTP 404)."""
    kind = ErrorKind.NOT_FOUND


SERVER_ERROR_MESSAGE = "Server error occurred"
NETWORK_ERROR_MESSAGE = "Network error - please check your connection"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def error_for_status(status_code: int, body: Any) -> BackendError:
    """
    Build the typed error for an HTTP error response.

    Args:
        status_code: Response status (>= 400)
        body: Decoded response body (dict, text or None)

    Returns:
        ConflictError for 409, NotFoundError for 404, BackendError otherwise
    """
    message = None
    if isinstance(body, dict):
        message = body.get("message")
    if not message:
        message = SERVER_ERROR_MESSAGE

    if status_code == 409:
        return ConflictError(message, status_code=status_code, payload=body)
    if status_code == 404:
        return NotFoundError(message, status_code=status_code, payload=body)
    return BackendError(message, status_code=status_code, payload=body)
