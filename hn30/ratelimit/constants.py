"""Rate limiting constants for expensive endpoints."""

# Burst size per client identity.
RATE_LIMIT_CAPACITY = 1.0

# One token is restored every this many seconds (10 requests per minute).
RATE_LIMIT_REFILL_SECONDS = 6.0

UNKNOWN_IDENTITY = "unknown"
