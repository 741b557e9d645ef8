"""Rate limit tracking for GitHub API.

This module turns the rate limit counters carried by every response into
throttled log output.
"""

from .schemas import RateLimitSnapshot
from .throttle import RateLimitLogThrottle

__all__ = [
    "RateLimitLogThrottle",
    "RateLimitSnapshot",
]
