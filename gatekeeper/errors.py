"""Error kinds raised by the credential and session services.

Every error carries an ``ErrorKind`` tag so callers can branch on the kind
without string matching. ``public_message`` is what may be shown to a client;
store and internal failures never expose their detail.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    ALREADY_EXISTS = "already_exists"
    UNAUTHORIZED = "unauthorized"
    BAD_REQUEST = "bad_request"
    STORE = "store_error"
    INTERNAL = "internal"


class AuthError(Exception):
    """Base class for service-layer errors mapped to HTTP responses."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    expose_message: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def public_message(self) -> str:
        return self.message if self.expose_message else "internal server error"


class ValidationError(AuthError):
    """Malformed request; no store was touched (400)."""

    kind = ErrorKind.VALIDATION
    status_code = 400
    expose_message = True


class AlreadyExistsError(AuthError):
    """Unique constraint violated, e.g. email already registered (409)."""

    kind = ErrorKind.ALREADY_EXISTS
    status_code = 409
    expose_message = True


class UnauthorizedError(AuthError):
    """Bad credentials, unknown or inactive user, invalid token (401)."""

    kind = ErrorKind.UNAUTHORIZED
    status_code = 401
    expose_message = True


class BadRequestError(AuthError):
    """Invalid or expired reset token (400)."""

    kind = ErrorKind.BAD_REQUEST
    status_code = 400
    expose_message = True


class StoreError(AuthError):
    """User or session store unreachable, or stored data corrupted (503)."""

    kind = ErrorKind.STORE
    status_code = 503


class InternalError(AuthError):
    """Invariant violation inside the service (500)."""

    kind = ErrorKind.INTERNAL
    status_code = 500


__all__ = [
    "ErrorKind",
    "AuthError",
    "ValidationError",
    "AlreadyExistsError",
    "UnauthorizedError",
    "BadRequestError",
    "StoreError",
    "InternalError",
]
