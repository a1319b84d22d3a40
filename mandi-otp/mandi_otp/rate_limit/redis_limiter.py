"""
Redis Rate Limiter
==================
Redis-backed fixed-window send limiter using a Lua script for atomicity.
"""

import time
from typing import Callable, Hashable, Optional

import structlog
from redis.exceptions import RedisError

from ..exceptions import StorageFailure
from .in_memory import RateLimiter
from .models import RateLimitInfo

logger = structlog.get_logger(__name__)

# Lua script for an atomic fixed window that opens on the first request
FIXED_WINDOW_SCRIPT = """
local key = KEYS[1]
local rate = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local now = tonumber(ARGV[3])

local count = tonumber(redis.call('HGET', key, 'count') or '0')
local expires = tonumber(redis.call('HGET', key, 'expires') or '0')

if count == 0 or expires <= now then
    redis.call('HSET', key, 'count', 1, 'expires', now + window)
    redis.call('EXPIRE', key, window)
    return {1, rate - 1, tostring(now + window), 0}
end

if count >= rate then
    return {0, 0, tostring(expires), expires - now}
end

count = redis.call('HINCRBY', key, 'count', 1)
return {1, rate - count, tostring(expires), 0}
"""


class RedisFixedWindowRateLimiter(RateLimiter):
    """
    Fixed-window limiter shared through Redis.

    Storage errors are raised as StorageFailure; the limiter never fails open.
    """

    def __init__(
        self,
        redis_client,
        rate: int = 5,
        window: int = 900,
        prefix: str = "otp",
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            redis_client: Async Redis client
            rate: Requests per window
            window: Window size in seconds
            prefix: Key namespace, one per call site
            clock: Time source
        """
        self.redis = redis_client
        self.rate = rate
        self.window = window
        self.prefix = prefix
        self._clock = clock
        self._script_sha: Optional[str] = None

    async def _ensure_script(self) -> str:
        """Load Lua script into Redis if needed."""
        if self._script_sha is None:
            self._script_sha = await self.redis.script_load(FIXED_WINDOW_SCRIPT)
        return self._script_sha

    def get_key(self, key: Hashable) -> str:
        """Generate a rate limit key."""
        return f"ratelimit:{self.prefix}:{key}"

    async def check_and_record(self, key: Hashable) -> RateLimitInfo:
        now = int(self._clock())
        try:
            script_sha = await self._ensure_script()
            result = await self.redis.evalsha(
                script_sha,
                1,
                self.get_key(key),
                self.rate,
                self.window,
                now,
            )
        except RedisError as e:
            logger.error("rate_limit_check_failed", error=str(e))
            raise StorageFailure("Rate limit check failed", operation="rate_limit") from e

        allowed, remaining, reset_at, retry_after = result
        return RateLimitInfo(
            allowed=bool(int(allowed)),
            remaining=int(remaining),
            limit=self.rate,
            reset_at=float(reset_at),
            retry_after=max(1, int(retry_after)) if not int(allowed) else None,
        )

    async def sweep_expired(self) -> int:
        # Redis expires window keys on its own.
        return 0
