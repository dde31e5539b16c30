"""Per-client fixed-window rate limiting."""

import logging
import math
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateBucket:
    """Request counter for one client in the current window."""

    count: int
    reset_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.reset_at


@dataclass(frozen=True)
class Admission:
    """Outcome of an admission check."""

    allowed: bool
    retry_after: Optional[int] = None

    @staticmethod
    def granted() -> "Admission":
        """Create an allowed result."""
        return Admission(allowed=True)

    @staticmethod
    def denied(retry_after: int) -> "Admission":
        """Create a denied result with the seconds until the window resets."""
        return Admission(allowed=False, retry_after=retry_after)


class FixedWindowRateLimiter:
    """
    Rate limiter that admits a fixed number of requests per client per window.

    The window is not sliding: a client's counter is replaced once its
    window has elapsed, so bursts straddling a boundary are accepted.

    admit() never awaits, so on a single event loop each call updates the
    bucket map atomically.

    Example:
        limiter = FixedWindowRateLimiter(capacity=20, window_seconds=60)

        admission = limiter.admit("203.0.113.7")
        if not admission.allowed:
            print(f"Retry in {admission.retry_after}s")
    """

    def __init__(
        self,
        capacity: int = 20,
        window_seconds: float = 60.0,
        max_buckets: int = 10_000,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the rate limiter.

        Args:
            capacity: Requests admitted per client per window
            window_seconds: Window length in seconds
            max_buckets: Tracked clients before stale buckets are evicted
            clock: Monotonic time source (defaults to time.monotonic)
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.capacity = capacity
        self.window_seconds = window_seconds
        self.max_buckets = max_buckets
        self._clock = clock or time.monotonic

        # Ordered by bucket creation; oldest first
        self._buckets: OrderedDict[str, RateBucket] = OrderedDict()

    def _new_bucket(self, client_id: str, now: float) -> None:
        self._buckets.pop(client_id, None)
        self._buckets[client_id] = RateBucket(count=1, reset_at=now + self.window_seconds)
        if len(self._buckets) > self.max_buckets:
            self._evict(now)

    def _evict(self, now: float) -> None:
        """Drop expired buckets, then the oldest ones until under max_buckets."""
        self.purge_expired(now)
        while len(self._buckets) > self.max_buckets:
            client_id, _ = self._buckets.popitem(last=False)
            logger.debug(f"Evicted rate limit bucket for {client_id}")

    def admit(self, client_id: str) -> Admission:
        """
        Count a request from a client and decide whether to serve it.

        Args:
            client_id: Identifier of the requesting client (source address)

        Returns:
            Admission with allowed flag and, when denied, retry_after seconds
        """
        now = self._clock()
        bucket = self._buckets.get(client_id)

        if bucket is None or bucket.is_expired(now):
            self._new_bucket(client_id, now)
            return Admission.granted()

        if bucket.count < self.capacity:
            bucket.count += 1
            return Admission.granted()

        retry_after = max(1, math.ceil(bucket.reset_at - now))
        logger.info(f"Rate limit exceeded for {client_id}, retry in {retry_after}s")
        return Admission.denied(retry_after)

    def purge_expired(self, now: Optional[float] = None) -> int:
        """
        Remove buckets whose window has elapsed.

        Args:
            now: Current clock reading (defaults to the limiter's clock)

        Returns:
            Number of buckets removed
        """
        if now is None:
            now = self._clock()
        expired = [key for key, bucket in self._buckets.items() if bucket.is_expired(now)]
        for key in expired:
            del self._buckets[key]
        return len(expired)

    def reset(self) -> None:
        """Forget all clients."""
        self._buckets.clear()

    def get_stats(self) -> dict:
        """Get rate limiter statistics."""
        return {
            "clients_tracked": len(self._buckets),
            "capacity": self.capacity,
            "window_seconds": self.window_seconds,
        }
