"""
OTP Exceptions
==============
Exception classes raised by the OTP core.

Every recoverable failure derives from ``OTPError`` and carries a stable
``code`` plus a ``message`` that is safe to show to an end user.
"""

from datetime import datetime, timezone
from typing import Optional


class OTPError(Exception):
    """Base class for OTP failures a caller can recover from."""

    code: str = "otp_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RateLimited(OTPError):
    """Raised when an identifier has requested too many codes in the window."""

    code = "rate_limited"

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        minutes, seconds = divmod(retry_after, 60)
        super().__init__(
            f"Too many OTP requests. Please try again in {minutes}m {seconds}s."
        )


class OTPNotFound(OTPError):
    """No live code exists for the key."""

    code = "not_found"

    def __init__(self, attempts_remaining: Optional[int] = None):
        self.attempts_remaining = attempts_remaining
        super().__init__("OTP expired or not found. Please request a new one.")


class OTPExpired(OTPError):
    """The stored code outlived its TTL or was already used."""

    code = "expired"

    def __init__(self, attempts_remaining: Optional[int] = None):
        self.attempts_remaining = attempts_remaining
        super().__init__("OTP has expired. Please request a new one.")


class InvalidCode(OTPError):
    """The supplied code does not match."""

    code = "invalid_code"

    def __init__(self, attempts_remaining: int):
        self.attempts_remaining = attempts_remaining
        super().__init__(f"Invalid OTP. {attempts_remaining} attempts remaining.")


class VerificationLocked(OTPError):
    """Raised while an identifier is locked out after repeated wrong guesses."""

    code = "locked"

    def __init__(self, locked_until: float, now: float):
        self.locked_until = locked_until
        remaining = max(0, int(locked_until - now))
        minutes = max(1, -(-remaining // 60))
        super().__init__(
            f"Too many incorrect attempts. Please try again in {minutes} minutes."
        )

    @property
    def locked_until_dt(self) -> datetime:
        return datetime.fromtimestamp(self.locked_until, tz=timezone.utc)


class RegistrationSessionExpired(OTPError):
    """The OTP verified but the staged registration draft has lapsed."""

    code = "registration_session_expired"

    def __init__(self):
        super().__init__(
            "Registration session expired. Please start registration again."
        )


class StorageFailure(Exception):
    """
    A backing store could not be read or written.

    Not an ``OTPError``: storage failures are fatal for the current request
    and must reach the caller as an internal error.
    """

    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.operation = operation


class ConfigurationError(ValueError):
    """Raised when OTP settings are out of range."""
    pass
