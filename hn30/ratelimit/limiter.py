"""Per-client token-bucket rate limiter."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from hn30.ratelimit.constants import RATE_LIMIT_CAPACITY, RATE_LIMIT_REFILL_SECONDS


logger = structlog.get_logger()

# Absorbs float error from summing fractional refills (6 x 1/6 < 1).
_TOKEN_EPSILON = 1e-9


@dataclass
class TokenBucket:
    """Token bucket with continuous refill.

    Thread-safe: concurrent ``try_acquire`` calls for the same bucket are
    linearized by its lock.

    Attributes:
        capacity: Maximum tokens in the bucket (burst capacity).
        refill_per_second: Tokens restored per second.
        clock: Monotonic time source.
    """

    capacity: float
    refill_per_second: float
    clock: Callable[[], float] = time.monotonic

    _tokens: float = field(init=False, default=0.0)
    _last_refill: float = field(init=False, default=0.0)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        """Start full."""
        self._tokens = self.capacity
        self._last_refill = self.clock()

    def _refill(self) -> None:
        """Refill tokens based on elapsed time.

        Must be called while holding the lock.
        """
        now = self.clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_per_second)
        self._last_refill = now

    def try_acquire(self, tokens: float = 1.0) -> bool:
        """Take tokens if available, without blocking.

        Args:
            tokens: Number of tokens to take.

        Returns:
            True if the tokens were taken.
        """
        with self._lock:
            self._refill()
            if self._tokens + _TOKEN_EPSILON >= tokens:
                self._tokens = max(0.0, self._tokens - tokens)
                return True
            return False

    def available_tokens(self) -> float:
        """Current token count after refill."""
        with self._lock:
            self._refill()
            return self._tokens


class RateLimiter:
    """Token bucket per client identity.

    Buckets are created lazily on first sight and never evicted. The
    identity map is guarded by its own lock; token arithmetic happens under
    each bucket's lock so different identities never contend.
    """

    def __init__(
        self,
        capacity: float = RATE_LIMIT_CAPACITY,
        refill_seconds: float = RATE_LIMIT_REFILL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            capacity: Burst size per identity.
            refill_seconds: Seconds to restore one token.
            clock: Monotonic time source.
        """
        self._capacity = capacity
        self._refill_per_second = 1.0 / refill_seconds
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._buckets_lock = threading.Lock()
        self._log = logger.bind(component="ratelimit")

    def _bucket_for(self, identity: str) -> TokenBucket:
        with self._buckets_lock:
            bucket = self._buckets.get(identity)
            if bucket is None:
                bucket = TokenBucket(
                    capacity=self._capacity,
                    refill_per_second=self._refill_per_second,
                    clock=self._clock,
                )
                self._buckets[identity] = bucket
            return bucket

    def allow(self, identity: str) -> bool:
        """Decide whether a request from ``identity`` may proceed.

        Args:
            identity: Client identity.

        Returns:
            True if a token was available and consumed.
        """
        allowed = self._bucket_for(identity).try_acquire()
        if not allowed:
            self._log.warning("rate_limit_exceeded", client_ip=identity)
        return allowed

    @property
    def tracked_identities(self) -> int:
        """Number of identities with a bucket."""
        with self._buckets_lock:
            return len(self._buckets)
