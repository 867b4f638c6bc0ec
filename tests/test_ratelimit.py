"""Tests for RateLimiter."""

from funnelnav.store.ratelimit import RateLimiter


class FakeClock:
    """Controllable time source."""

    def __init__(self, now: float = 1_000_020.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRateLimiter:
    """Test fixed-window counting."""

    def test_allows_up_to_limit(self):
        """Test requests are allowed until the minute budget is spent."""
        limiter = RateLimiter(per_minute=3, per_hour=100, clock=FakeClock())
        assert [limiter.allow("api") for _ in range(4)] == [True, True, True, False]

    def test_keys_are_independent(self):
        """Test each key has its own budget."""
        limiter = RateLimiter(per_minute=1, per_hour=100, clock=FakeClock())
        assert limiter.allow("a") is True
        assert limiter.allow("b") is True
        assert limiter.allow("a") is False

    def test_minute_window_resets_on_boundary(self):
        """Test the minute counter resets when the next bucket opens."""
        clock = FakeClock(now=600.0)
        limiter = RateLimiter(per_minute=1, per_hour=100, clock=clock)
        assert limiter.allow("api") is True
        clock.now = 659.9
        assert limiter.allow("api") is False
        clock.now = 660.0
        assert limiter.allow("api") is True

    def test_hour_window_applies(self):
        """Test the hour budget is enforced across minutes."""
        clock = FakeClock(now=3600.0)
        limiter = RateLimiter(per_minute=10, per_hour=2, clock=clock)
        assert limiter.allow("api") is True
        clock.now += 60
        assert limiter.allow("api") is True
        clock.now += 60
        assert limiter.allow("api") is False

    def test_refused_requests_are_not_counted(self):
        """Test a refusal does not consume budget."""
        clock = FakeClock(now=3600.0)
        limiter = RateLimiter(per_minute=1, per_hour=2, clock=clock)
        assert limiter.allow("api") is True
        assert limiter.allow("api") is False
        clock.now += 60
        assert limiter.allow("api") is True

    def test_remaining(self):
        """Test remaining budget per window."""
        limiter = RateLimiter(per_minute=5, per_hour=10, clock=FakeClock(now=3600.0))
        limiter.allow("api")
        limiter.allow("api")
        assert limiter.remaining("api") == {"minute": 3, "hour": 8}
        assert limiter.remaining("other") == {"minute": 5, "hour": 10}

    def test_retry_after(self):
        """Test seconds until the exhausted window resets."""
        clock = FakeClock(now=630.0)
        limiter = RateLimiter(per_minute=1, per_hour=100, clock=clock)
        assert limiter.retry_after("api") == 0.0
        limiter.allow("api")
        assert limiter.retry_after("api") == 30.0

    def test_reset_key(self):
        """Test reset clears one key."""
        limiter = RateLimiter(per_minute=1, per_hour=100, clock=FakeClock())
        limiter.allow("a")
        limiter.allow("b")
        limiter.reset("a")
        assert limiter.allow("a") is True
        assert limiter.allow("b") is False

    def test_reset_all(self):
        """Test reset without a key clears everything."""
        limiter = RateLimiter(per_minute=1, per_hour=100, clock=FakeClock())
        limiter.allow("a")
        limiter.reset()
        assert limiter.allow("a") is True
