"""
Attempt Guard
=============
Counts wrong verification guesses per key and locks the key out once the
ceiling is reached.
"""

import time
from typing import Callable, Dict, Hashable, Optional

import structlog

from .models import AttemptCounter, FailureOutcome, LockDecision

logger = structlog.get_logger(__name__)


class AttemptGuard:
    """In-memory brute-force guard keyed identically to the credential it protects."""

    def __init__(
        self,
        max_attempts: int = 5,
        lockout_seconds: int = 1800,
        clock: Callable[[], float] = time.time,
    ):
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._clock = clock
        self._counters: Dict[Hashable, AttemptCounter] = {}

    async def check_locked(self, key: Hashable) -> LockDecision:
        """
        Refuse while a lockout is in force.

        An elapsed lockout clears the counter, so the key starts fresh.
        """
        now = self._clock()
        counter = self._counters.get(key)
        if counter is None or counter.lockout_until is None:
            return LockDecision(allowed=True)

        if counter.is_locked(now):
            return LockDecision(
                allowed=False,
                locked_until=counter.lockout_until,
            )

        del self._counters[key]
        return LockDecision(allowed=True)

    async def record_failure(self, key: Hashable) -> FailureOutcome:
        """
        Count one wrong guess.

        Returns:
            FailureOutcome with attempts remaining and whether the key is now locked
        """
        now = self._clock()
        counter = self._counters.get(key)
        if counter is None:
            counter = self._counters[key] = AttemptCounter()

        counter.fail_count += 1
        counter.last_attempt_at = now

        if counter.fail_count >= self.max_attempts:
            if counter.lockout_until is None:
                counter.lockout_until = now + self.lockout_seconds
                logger.warning(
                    "otp_verification_locked",
                    failures=counter.fail_count,
                    lockout_seconds=self.lockout_seconds,
                )
            return FailureOutcome(
                attempts_remaining=0,
                locked=True,
                locked_until=counter.lockout_until,
            )

        return FailureOutcome(
            attempts_remaining=self.max_attempts - counter.fail_count,
            locked=False,
        )

    async def clear(self, key: Hashable) -> None:
        self._counters.pop(key, None)

    def peek(self, key: Hashable) -> Optional[AttemptCounter]:
        return self._counters.get(key)

    async def sweep_expired(self) -> int:
        """
        Drop counters whose lockout has elapsed, and unlocked counters idle
        for longer than one lockout period.
        """
        now = self._clock()
        stale = []
        for key, counter in self._counters.items():
            if counter.lockout_until is not None:
                if counter.lockout_until <= now:
                    stale.append(key)
            elif now - counter.last_attempt_at >= self.lockout_seconds:
                stale.append(key)
        for key in stale:
            self._counters.pop(key, None)
        return len(stale)
