"""Per-client rate limiting."""

from hn30.ratelimit.constants import RATE_LIMIT_CAPACITY, RATE_LIMIT_REFILL_SECONDS
from hn30.ratelimit.identity import client_identity
from hn30.ratelimit.limiter import RateLimiter, TokenBucket


__all__ = [
    "RATE_LIMIT_CAPACITY",
    "RATE_LIMIT_REFILL_SECONDS",
    "RateLimiter",
    "TokenBucket",
    "client_identity",
]
