"""
Rate Limiting
=============
Fixed-window limiters bounding how many codes an identifier may request.
"""

from .models import RateLimitInfo, RateLimitCounter
from .in_memory import RateLimiter, FixedWindowRateLimiter
from .redis_limiter import RedisFixedWindowRateLimiter, FIXED_WINDOW_SCRIPT

__all__ = [
    # Models
    "RateLimitInfo",
    "RateLimitCounter",
    # Limiters
    "RateLimiter",
    "FixedWindowRateLimiter",
    "RedisFixedWindowRateLimiter",
    # Scripts
    "FIXED_WINDOW_SCRIPT",
]
