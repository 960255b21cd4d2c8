"""Exceptions raised by the access code engine and its issuance guard."""
from __future__ import annotations


class CredentialValidationError(ValueError):
    """Raised when generation parameters are rejected before any code is minted."""

    field: str | None = None

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if field is not None:
            self.field = field


class AdminSecretTooShort(CredentialValidationError):
    field = "admin_secret"


class UseCountOutOfRange(CredentialValidationError):
    field = "count"


class DurationHoursOutOfRange(CredentialValidationError):
    field = "hours"


class DurationMinutesInvalid(CredentialValidationError):
    field = "minutes"


class DurationTooShort(CredentialValidationError):
    field = "hours"


class InvalidCalendarDate(CredentialValidationError):
    field = "end"


class EndTimeNotInFuture(CredentialValidationError):
    field = "end"


class EndTimeOutOfRange(CredentialValidationError):
    field = "end"


class MissingParameter(CredentialValidationError):
    """A credential request omitted a parameter its scheme requires."""


class IssuanceError(RuntimeError):
    """Base class for issuance guard refusals."""


class ReissueTooSoon(IssuanceError):
    """Raised when a repeatable credential is requested inside the reissue interval."""

    def __init__(self, subject: str, retry_after_seconds: int) -> None:
        super().__init__(
            f"A new code for {subject!r} can be issued in {retry_after_seconds} seconds"
        )
        self.subject = subject
        self.retry_after_seconds = retry_after_seconds


class StorageUnavailable(RuntimeError):
    """Raised when the configured guard store cannot be reached."""


__all__ = [
    "AdminSecretTooShort",
    "CredentialValidationError",
    "DurationHoursOutOfRange",
    "DurationMinutesInvalid",
    "DurationTooShort",
    "EndTimeNotInFuture",
    "EndTimeOutOfRange",
    "InvalidCalendarDate",
    "IssuanceError",
    "MissingParameter",
    "ReissueTooSoon",
    "StorageUnavailable",
    "UseCountOutOfRange",
]
