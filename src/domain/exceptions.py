"""
Domain exceptions - Semantic error types for verification codes.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each exception carries a ``public_message`` that is safe to return
to callers; anything more specific belongs in the logs.
"""


class VerificationError(Exception):
    """Base class for verification domain errors."""

    public_message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)


class ValidationError(VerificationError):
    """A required field is missing or empty."""

    def __init__(self, field: str) -> None:
        self.field = field
        self.public_message = f"{field} is required."
        super().__init__(self.public_message)


class StorageError(VerificationError):
    """The code store is unreachable or a read/write failed."""

    public_message = "Database error."


class DeliveryError(VerificationError):
    """The mail transport refused or failed to send a message."""

    public_message = "Email failed to send."


class InvalidOrExpired(VerificationError):
    """No matching, unexpired code. Deliberately says nothing more."""

    public_message = "Invalid or expired code."


class DependencyUnhealthy(VerificationError):
    """A health probe exhausted its attempts."""

    def __init__(self, component: str, attempts: int) -> None:
        self.component = component
        self.attempts = attempts
        super().__init__(f"{component} unhealthy after {attempts} attempt(s)")
