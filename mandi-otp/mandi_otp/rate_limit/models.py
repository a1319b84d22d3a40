"""
Rate Limit Models
=================
Data models for rate limiting results.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass
class RateLimitInfo:
    """Rate limit check result with quota information."""
    allowed: bool
    remaining: int
    limit: int
    reset_at: float  # Unix timestamp the window closes
    retry_after: Optional[int] = None  # Seconds until retry allowed


@dataclass
class RateLimitCounter:
    """Send requests counted in the current window for one key."""
    attempts: int
    window_expires_at: float
