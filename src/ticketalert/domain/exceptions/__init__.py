"""Domain exceptions.

HTTP mapping lives in api/exception_handlers.py:

- ValidationException            -> 400
- DuplicateEntityException       -> 400 (user-facing conflict message)
- AuthenticationError            -> 401
- ConfigurationError             -> 503
- anything else                  -> 500 with a generic message
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so handlers can return it without
    # parsing str(exception). Don't raise this directly - use a specific subclass.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationException(DomainException):
    """Raised when caller-supplied input breaks a business rule.

    Example: missing eventId, malformed email address.
    """

    pass


class DuplicateEntityException(DomainException):
    """Raised when trying to create a duplicate entity."""

    def __init__(
        self, entity_type: str, entity_id: Any, message: str | None = None
    ) -> None:
        super().__init__(message or f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateSubscriptionError(DuplicateEntityException):
    """A pending subscription for the same (event, email) pair already exists."""

    # Yo, the message is what the user sees - keep it in Norwegian like the rest of the UI.
    def __init__(self, event_id: str, email: str) -> None:
        super().__init__(
            "TrackedSubscription",
            f"{event_id}:{email}",
            message="Du følger allerede dette arrangementet",
        )
        self.event_id = event_id
        self.email = email


class AuthenticationError(DomainException):
    """No usable credentials (missing Spotify session, wrong cron secret)."""

    pass


class ConfigurationError(DomainException):
    """A required integration setting is missing."""

    pass


class TokenRefreshException(DomainException):
    """Raised when a Spotify refresh token is rejected.

    Common causes: the user revoked access, or the app credentials changed.
    The caller should drop the session cookies and ask the user to reconnect.
    """

    def __init__(
        self,
        message: str = "Token refresh failed. Please reconnect Spotify.",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code  # e.g., "invalid_grant"
        self.http_status = http_status  # e.g., 400, 401


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "DomainException",
    "DuplicateEntityException",
    "DuplicateSubscriptionError",
    "TokenRefreshException",
    "ValidationException",
]
