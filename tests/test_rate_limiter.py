"""Tests for per-client fixed-window rate limiting."""

import pytest
from urlreader.http import Admission, FixedWindowRateLimiter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Create a controllable clock."""
    return FakeClock()


class TestAdmission:
    """Tests for Admission results."""

    def test_granted(self):
        """Test granted admission has no retry hint."""
        admission = Admission.granted()
        assert admission.allowed is True
        assert admission.retry_after is None

    def test_denied(self):
        """Test denied admission carries retry_after."""
        admission = Admission.denied(12)
        assert admission.allowed is False
        assert admission.retry_after == 12


class TestFixedWindowRateLimiter:
    """Tests for FixedWindowRateLimiter."""

    def test_twenty_first_request_denied(self, clock):
        """Test that the 21st request in a window is refused."""
        limiter = FixedWindowRateLimiter(capacity=20, window_seconds=60, clock=clock)

        for _ in range(20):
            assert limiter.admit("203.0.113.7").allowed is True

        denied = limiter.admit("203.0.113.7")
        assert denied.allowed is False
        assert denied.retry_after is not None
        assert 1 <= denied.retry_after <= 60

    def test_retry_after_rounds_up(self, clock):
        """Test retry_after is the remaining window rounded up."""
        limiter = FixedWindowRateLimiter(capacity=1, window_seconds=60, clock=clock)
        limiter.admit("client")
        clock.advance(10.2)

        denied = limiter.admit("client")
        assert denied.retry_after == 50

    def test_retry_after_at_least_one(self, clock):
        """Test retry_after never drops below one second."""
        limiter = FixedWindowRateLimiter(capacity=1, window_seconds=60, clock=clock)
        limiter.admit("client")
        clock.advance(59.999)

        assert limiter.admit("client").retry_after == 1

    def test_window_resets(self, clock):
        """Test that a new window restores the quota."""
        limiter = FixedWindowRateLimiter(capacity=2, window_seconds=60, clock=clock)
        limiter.admit("client")
        limiter.admit("client")
        assert limiter.admit("client").allowed is False

        clock.advance(60)
        assert limiter.admit("client").allowed is True
        assert limiter.admit("client").allowed is True
        assert limiter.admit("client").allowed is False

    def test_denied_requests_do_not_extend_window(self, clock):
        """Test that refused requests leave the reset time unchanged."""
        limiter = FixedWindowRateLimiter(capacity=1, window_seconds=60, clock=clock)
        limiter.admit("client")
        for _ in range(5):
            clock.advance(10)
            limiter.admit("client")

        clock.advance(10)
        assert limiter.admit("client").allowed is True

    def test_clients_are_independent(self, clock):
        """Test that one client's usage does not affect another."""
        limiter = FixedWindowRateLimiter(capacity=1, window_seconds=60, clock=clock)
        assert limiter.admit("a").allowed is True
        assert limiter.admit("a").allowed is False
        assert limiter.admit("b").allowed is True

    def test_evicts_when_over_max_buckets(self, clock):
        """Test that tracked clients stay within max_buckets."""
        limiter = FixedWindowRateLimiter(capacity=1, window_seconds=60, max_buckets=3, clock=clock)
        for client in ("a", "b", "c", "d"):
            limiter.admit(client)

        assert limiter.get_stats()["clients_tracked"] == 3
        # Oldest client was evicted and starts a fresh window
        assert limiter.admit("a").allowed is True

    def test_eviction_prefers_expired_buckets(self, clock):
        """Test expired buckets are dropped before live ones."""
        limiter = FixedWindowRateLimiter(capacity=1, window_seconds=60, max_buckets=2, clock=clock)
        limiter.admit("old")
        clock.advance(61)
        limiter.admit("b")
        limiter.admit("c")

        assert limiter.get_stats()["clients_tracked"] == 2
        assert limiter.admit("b").allowed is False
        assert limiter.admit("c").allowed is False

    def test_purge_expired(self, clock):
        """Test purging removes only elapsed windows."""
        limiter = FixedWindowRateLimiter(window_seconds=60, clock=clock)
        limiter.admit("a")
        clock.advance(30)
        limiter.admit("b")
        clock.advance(31)

        assert limiter.purge_expired() == 1
        assert limiter.get_stats()["clients_tracked"] == 1

    def test_reset(self, clock):
        """Test reset forgets all clients."""
        limiter = FixedWindowRateLimiter(capacity=1, clock=clock)
        limiter.admit("a")
        limiter.reset()
        assert limiter.admit("a").allowed is True

    @pytest.mark.parametrize("kwargs", [{"capacity": 0}, {"window_seconds": 0}])
    def test_rejects_invalid_arguments(self, kwargs):
        """Test constructor validation."""
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(**kwargs)
