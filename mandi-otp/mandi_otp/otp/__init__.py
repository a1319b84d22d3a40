"""
OTP Issuance and Verification
=============================
Secure OTP generation with hashed storage, rate limiting and brute-force
protection.
"""

from .models import ChannelType, Purpose, OTPKey, OTPRecord, IssueResult
from .hashing import generate_otp, hash_otp, verify_otp_hash, generate_salt, mask_identifier
from .credential_store import CredentialStore, InMemoryCredentialStore, RedisCredentialStore
from .engine import OTPEngine
from .service import OTPService, RequestCodeResult, ConfirmCodeResult

__all__ = [
    # Models
    "ChannelType",
    "Purpose",
    "OTPKey",
    "OTPRecord",
    "IssueResult",
    # Hashing
    "generate_otp",
    "hash_otp",
    "verify_otp_hash",
    "generate_salt",
    "mask_identifier",
    # Stores
    "CredentialStore",
    "InMemoryCredentialStore",
    "RedisCredentialStore",
    # Engine
    "OTPEngine",
    "OTPService",
    "RequestCodeResult",
    "ConfirmCodeResult",
]
