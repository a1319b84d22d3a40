"""
Mandi OTP Core
==============
One-time-passcode issuance and verification for phone and email
registration and login.
"""

__version__ = "0.1.0"

# OTP
from mandi_otp.otp import (
    ChannelType,
    Purpose,
    OTPKey,
    OTPRecord,
    IssueResult,
    generate_otp,
    hash_otp,
    verify_otp_hash,
    mask_identifier,
    CredentialStore,
    InMemoryCredentialStore,
    RedisCredentialStore,
    OTPEngine,
    OTPService,
    RequestCodeResult,
    ConfirmCodeResult,
)

# Configuration
from mandi_otp.config import OTPSettings, PurposePolicy

# Exceptions
from mandi_otp.exceptions import (
    OTPError,
    RateLimited,
    OTPNotFound,
    OTPExpired,
    InvalidCode,
    VerificationLocked,
    RegistrationSessionExpired,
    StorageFailure,
    ConfigurationError,
)

# Rate Limiting
from mandi_otp.rate_limit import (
    RateLimiter,
    FixedWindowRateLimiter,
    RedisFixedWindowRateLimiter,
    RateLimitInfo,
)

# Attempt Guard
from mandi_otp.attempts import AttemptGuard, FailureOutcome, LockDecision

# Staging
from mandi_otp.staging import StagingStore, RegistrationDraft, PendingRegistration

# Delivery
from mandi_otp.delivery import (
    DeliveryChannel,
    DeliveryResult,
    ConsoleChannel,
    SMTPEmailChannel,
    SMTPConfig,
    TwilioSMSChannel,
    TwilioConfig,
)

# Flows and wiring
from mandi_otp.registration import AccountStore, RegistrationFlow
from mandi_otp.sweeper import ExpirySweeper
from mandi_otp.factory import OTPStack, create_otp_stack, default_channels
from mandi_otp.log import setup_logging

__all__ = [
    # OTP
    "ChannelType",
    "Purpose",
    "OTPKey",
    "OTPRecord",
    "IssueResult",
    "generate_otp",
    "hash_otp",
    "verify_otp_hash",
    "mask_identifier",
    "CredentialStore",
    "InMemoryCredentialStore",
    "RedisCredentialStore",
    "OTPEngine",
    "OTPService",
    "RequestCodeResult",
    "ConfirmCodeResult",
    # Configuration
    "OTPSettings",
    "PurposePolicy",
    # Exceptions
    "OTPError",
    "RateLimited",
    "OTPNotFound",
    "OTPExpired",
    "InvalidCode",
    "VerificationLocked",
    "RegistrationSessionExpired",
    "StorageFailure",
    "ConfigurationError",
    # Rate Limiting
    "RateLimiter",
    "FixedWindowRateLimiter",
    "RedisFixedWindowRateLimiter",
    "RateLimitInfo",
    # Attempt Guard
    "AttemptGuard",
    "FailureOutcome",
    "LockDecision",
    # Staging
    "StagingStore",
    "RegistrationDraft",
    "PendingRegistration",
    # Delivery
    "DeliveryChannel",
    "DeliveryResult",
    "ConsoleChannel",
    "SMTPEmailChannel",
    "SMTPConfig",
    "TwilioSMSChannel",
    "TwilioConfig",
    # Flows and wiring
    "AccountStore",
    "RegistrationFlow",
    "ExpirySweeper",
    "OTPStack",
    "create_otp_stack",
    "default_channels",
    "setup_logging",
]
