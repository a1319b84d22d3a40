"""
Attempt Guard Models
====================
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class AttemptCounter:
    """Wrong guesses recorded for one key."""
    fail_count: int = 0
    last_attempt_at: float = 0.0
    lockout_until: Optional[float] = None

    def is_locked(self, now: float) -> bool:
        return self.lockout_until is not None and self.lockout_until > now


@dataclass
class LockDecision:
    """Result of ``AttemptGuard.check_locked``."""
    allowed: bool
    locked_until: Optional[float] = None


@dataclass
class FailureOutcome:
    """Result of ``AttemptGuard.record_failure``."""
    attempts_remaining: int
    locked: bool
    locked_until: Optional[float] = None
