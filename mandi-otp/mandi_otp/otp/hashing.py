"""
OTP Hashing Utilities
=====================
Code generation and one-way hashing for OTP storage.
"""

import secrets
import hashlib
import hmac


def generate_otp(length: int = 6) -> str:
    """
    Generate a numeric OTP from the system CSPRNG.

    Args:
        length: Number of digits

    Returns:
        String of exactly ``length`` decimal digits (leading zeros kept)
    """
    otp = secrets.randbelow(10 ** length)
    return str(otp).zfill(length)


def generate_salt() -> str:
    """Generate a random salt for OTP hashing."""
    return secrets.token_hex(16)


def hash_otp(otp: str, salt: str) -> str:
    """
    Hash an OTP with salt using SHA-256.

    Args:
        otp: Plain OTP
        salt: Random salt

    Returns:
        Hex digest
    """
    return hashlib.sha256(f"{salt}:{otp}".encode()).hexdigest()


def verify_otp_hash(otp: str, salt: str, stored_hash: str) -> bool:
    """
    Verify an OTP against its hash.

    Uses constant-time comparison.
    """
    computed_hash = hash_otp(str(otp).strip(), salt)
    return hmac.compare_digest(computed_hash, stored_hash)


def mask_identifier(identifier: str) -> str:
    """
    Mask a phone number or email for log output.

    ``+910000001234`` -> ``*********1234``, ``asha@example.com`` -> ``a***@example.com``
    """
    if "@" in identifier:
        local, _, domain = identifier.partition("@")
        return f"{local[:1]}***@{domain}"
    if len(identifier) <= 4:
        return "*" * len(identifier)
    return "*" * (len(identifier) - 4) + identifier[-4:]
