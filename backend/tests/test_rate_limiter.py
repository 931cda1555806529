"""Tests for the fixed-window RateLimiter."""

import pytest

from javarank.services.rate_limiter import LOGIN_LIMIT, RateLimiter, RateLimitRule


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
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock)


class TestRateLimiter:
    """Tests for RateLimiter.check and friends."""

    def test_allows_up_to_max_then_rejects(self, limiter):
        """Exactly max_attempts calls pass inside one window."""
        results = [limiter.check("login_1.2.3.4", 3, 60) for _ in range(5)]
        assert results == [True, True, True, False, False]

    def test_window_resets_after_reset_time(self, limiter, clock):
        for _ in range(3):
            assert limiter.check("k", 3, 60)
        assert not limiter.check("k", 3, 60)

        clock.advance(60)
        # Still inside the window at exactly reset_time
        assert not limiter.check("k", 3, 60)

        clock.advance(0.001)
        assert limiter.check("k", 3, 60)

    def test_rejections_do_not_extend_the_window(self, limiter, clock):
        """A flood of rejected calls does not keep the client locked out."""
        for _ in range(3):
            limiter.check("k", 3, 60)
        for _ in range(50):
            clock.advance(1)
            assert not limiter.check("k", 3, 60)
        clock.advance(11)
        assert limiter.check("k", 3, 60)

    def test_keys_are_independent(self, limiter):
        assert limiter.check("register_10.0.0.1", 1, 300)
        assert not limiter.check("register_10.0.0.1", 1, 300)
        assert limiter.check("register_10.0.0.2", 1, 300)
        assert limiter.check("login_10.0.0.1", 1, 300)

    def test_allow_uses_rule(self, limiter):
        results = [limiter.allow("login_ip", LOGIN_LIMIT) for _ in range(LOGIN_LIMIT.max_attempts + 1)]
        assert results.count(True) == LOGIN_LIMIT.max_attempts
        assert results[-1] is False

    def test_sweep_drops_expired_records(self, limiter, clock):
        limiter.check("short", 1, 10)
        limiter.check("long", 1, 1000)
        clock.advance(11)

        assert limiter.sweep() == 1
        assert len(limiter) == 1

    def test_periodic_sweep_runs_on_check(self, clock):
        limiter = RateLimiter(clock=clock, sweep_interval=100)
        limiter.check("old", 1, 10)
        clock.advance(150)
        limiter.check("new", 1, 10)
        assert len(limiter) == 1

    def test_table_is_bounded(self, clock):
        """Past max_keys the least recently used key is evicted."""
        limiter = RateLimiter(clock=clock, max_keys=3)
        for key in ("a", "b", "c"):
            limiter.check(key, 1, 60)
        limiter.check("a", 5, 60)  # touch "a"
        limiter.check("d", 1, 60)

        assert len(limiter) == 3
        # "b" was evicted, so it starts a fresh window
        assert limiter.check("b", 1, 60)

    def test_reset(self, limiter):
        limiter.check("k", 1, 60)
        assert not limiter.check("k", 1, 60)
        limiter.reset("k")
        assert limiter.check("k", 1, 60)

        limiter.reset()
        assert len(limiter) == 0

    def test_rule_is_immutable(self):
        rule = RateLimitRule(5, 300)
        with pytest.raises(AttributeError):
            rule.max_attempts = 10  # type: ignore[misc]
