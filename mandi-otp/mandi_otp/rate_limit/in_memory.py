"""
In-Memory Rate Limiter
======================
Fixed-window send limiter held in process memory.
"""

import math
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Hashable, Optional

from .models import RateLimitCounter, RateLimitInfo


class RateLimiter(ABC):
    """Contract shared by the in-memory and Redis limiters."""

    rate: int
    window: int

    @abstractmethod
    async def check_and_record(self, key: Hashable) -> RateLimitInfo:
        """Count one send request for ``key`` unless the window is full."""

    @abstractmethod
    async def sweep_expired(self) -> int:
        pass


class FixedWindowRateLimiter(RateLimiter):
    """
    Fixed-window counter.

    A window opens on the first request for a key and lasts ``window``
    seconds. Once ``rate`` requests are counted, further requests are
    refused until the window closes; the next request then opens a fresh
    window.
    """

    def __init__(
        self,
        rate: int = 5,
        window: int = 900,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            rate: Number of requests allowed per window
            window: Window size in seconds
            clock: Time source
        """
        self.rate = rate
        self.window = window
        self._clock = clock
        self._counters: Dict[Hashable, RateLimitCounter] = {}

    async def check_and_record(self, key: Hashable) -> RateLimitInfo:
        """
        Check if a send is allowed and count it.

        Args:
            key: Identifier key (e.g. ``OTPKey``)

        Returns:
            RateLimitInfo with decision and quota
        """
        now = self._clock()
        counter = self._counters.get(key)

        if counter is None or counter.window_expires_at <= now:
            counter = RateLimitCounter(attempts=1, window_expires_at=now + self.window)
            self._counters[key] = counter
            return RateLimitInfo(
                allowed=True,
                remaining=self.rate - 1,
                limit=self.rate,
                reset_at=counter.window_expires_at,
            )

        if counter.attempts >= self.rate:
            return RateLimitInfo(
                allowed=False,
                remaining=0,
                limit=self.rate,
                reset_at=counter.window_expires_at,
                retry_after=max(1, math.ceil(counter.window_expires_at - now)),
            )

        counter.attempts += 1
        return RateLimitInfo(
            allowed=True,
            remaining=self.rate - counter.attempts,
            limit=self.rate,
            reset_at=counter.window_expires_at,
        )

    def peek(self, key: Hashable) -> Optional[RateLimitCounter]:
        """Current counter for ``key`` without counting a request."""
        return self._counters.get(key)

    async def sweep_expired(self) -> int:
        now = self._clock()
        expired = [k for k, c in self._counters.items() if c.window_expires_at <= now]
        for k in expired:
            self._counters.pop(k, None)
        return len(expired)
