"""
Attempt Guard
=============
Brute-force protection for OTP verification.
"""

from .models import AttemptCounter, LockDecision, FailureOutcome
from .guard import AttemptGuard

__all__ = [
    "AttemptCounter",
    "LockDecision",
    "FailureOutcome",
    "AttemptGuard",
]
