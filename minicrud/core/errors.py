"""
Error taxonomy shared by the storage layer and the services.

Every error carries a stable ``category`` and the HTTP status the transport
maps it to. Messages are safe to show to the end user.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for every error surfaced to a caller."""

    category = "error"
    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    category = "validation"
    status_code = 422
    default_message = "Invalid input"


class ConflictError(ServiceError):
    category = "conflict"
    status_code = 409
    default_message = "That email already exists"


class NotFoundError(ServiceError):
    category = "not_found"
    status_code = 404
    default_message = "Index does not exist"


class Unauthorized(ServiceError):
    category = "unauthorized"
    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentials(Unauthorized):
    """Single answer for unknown email and wrong password alike."""

    category = "invalid_credentials"
    default_message = "Invalid credentials"


class UnsupportedAction(ServiceError):
    category = "unsupported"
    status_code = 400
    default_message = "Unsupported action"


class RateLimited(ServiceError):
    category = "rate_limited"
    status_code = 429
    default_message = "Too many requests. Try again in a moment."


class Busy(ServiceError):
    """Lock acquisition timed out; the caller owns the retry policy."""

    category = "busy"
    status_code = 503
    default_message = "Storage is busy, try again"


class StorageError(ServiceError):
    category = "storage"
    status_code = 500
    default_message = "Storage failure"


class EncodingError(StorageError):
    category = "encoding"
    default_message = "Could not encode collection"


class StorageIOError(StorageError):
    category = "io"
    default_message = "Could not write collection"
