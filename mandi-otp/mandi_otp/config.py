"""
OTP Configuration
=================
Settings for code generation, expiry, rate limiting and lockout.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .exceptions import ConfigurationError


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class PurposePolicy:
    """Expiry and send limits applied at one call site (registration or login)."""
    ttl_seconds: int = 300
    rate_limit: int = 5
    rate_window_seconds: int = 900


@dataclass
class OTPSettings:
    """Configuration for the OTP core."""
    otp_length: int = 6
    registration: PurposePolicy = field(default_factory=PurposePolicy)
    login: PurposePolicy = field(
        default_factory=lambda: PurposePolicy(
            ttl_seconds=120, rate_limit=3, rate_window_seconds=120
        )
    )
    max_verify_attempts: int = 5
    lockout_seconds: int = 1800  # 30 minutes
    staging_ttl_seconds: int = 600
    delivery_timeout_seconds: float = 10.0
    sweep_interval_seconds: float = 60.0
    # Echo raw codes back to callers. Test automation only.
    expose_code: bool = False
    redis_url: Optional[str] = None

    def policy_for(self, purpose: str) -> PurposePolicy:
        """Policy for a ``Purpose`` (plain strings are accepted too)."""
        if purpose == "login":
            return self.login
        return self.registration

    def validate(self) -> "OTPSettings":
        """Raise ConfigurationError for values that cannot work."""
        if self.otp_length < 1:
            raise ConfigurationError("otp_length must be at least 1")
        for name, policy in (("registration", self.registration), ("login", self.login)):
            if policy.ttl_seconds <= 0:
                raise ConfigurationError(f"{name}.ttl_seconds must be positive")
            if policy.rate_limit <= 0:
                raise ConfigurationError(f"{name}.rate_limit must be positive")
            if policy.rate_window_seconds <= 0:
                raise ConfigurationError(f"{name}.rate_window_seconds must be positive")
        if self.max_verify_attempts <= 0:
            raise ConfigurationError("max_verify_attempts must be positive")
        if self.lockout_seconds <= 0:
            raise ConfigurationError("lockout_seconds must be positive")
        if self.staging_ttl_seconds <= 0:
            raise ConfigurationError("staging_ttl_seconds must be positive")
        if self.delivery_timeout_seconds <= 0:
            raise ConfigurationError("delivery_timeout_seconds must be positive")
        if self.sweep_interval_seconds <= 0:
            raise ConfigurationError("sweep_interval_seconds must be positive")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OTPSettings":
        """
        Build settings from ``OTP_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Validated OTPSettings
        """
        env = os.environ if environ is None else environ

        def _int(name: str, default: int) -> int:
            raw = env.get(name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError:
                raise ConfigurationError(f"{name} must be an integer, got {raw!r}")

        def _float(name: str, default: float) -> float:
            raw = env.get(name)
            if raw is None or raw == "":
                return default
            try:
                return float(raw)
            except ValueError:
                raise ConfigurationError(f"{name} must be a number, got {raw!r}")

        return cls(
            otp_length=_int("OTP_LENGTH", 6),
            registration=PurposePolicy(
                ttl_seconds=_int("OTP_TTL_SECONDS", 300),
                rate_limit=_int("OTP_RATE_LIMIT", 5),
                rate_window_seconds=_int("OTP_RATE_WINDOW_SECONDS", 900),
            ),
            login=PurposePolicy(
                ttl_seconds=_int("OTP_LOGIN_TTL_SECONDS", 120),
                rate_limit=_int("OTP_LOGIN_RATE_LIMIT", 3),
                rate_window_seconds=_int("OTP_LOGIN_RATE_WINDOW_SECONDS", 120),
            ),
            max_verify_attempts=_int("OTP_MAX_VERIFY_ATTEMPTS", 5),
            lockout_seconds=_int("OTP_LOCKOUT_SECONDS", 1800),
            staging_ttl_seconds=_int("OTP_STAGING_TTL_SECONDS", 600),
            delivery_timeout_seconds=_float("OTP_DELIVERY_TIMEOUT_SECONDS", 10.0),
            sweep_interval_seconds=_float("OTP_SWEEP_INTERVAL_SECONDS", 60.0),
            expose_code=env.get("OTP_EXPOSE_CODE", "").strip().lower() in _TRUTHY,
            redis_url=env.get("OTP_REDIS_URL") or None,
        ).validate()
