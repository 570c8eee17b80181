"""Tests for the sliding-window rate limiter."""

import pytest

from nexusminds.services.rate_limiter import SlidingWindowRateLimiter


@pytest.fixture
def limiter():
    """Three requests per 60 seconds."""
    return SlidingWindowRateLimiter(max_requests=3, window_seconds=60)


class TestSlidingWindowRateLimiter:
    """Tests for SlidingWindowRateLimiter."""

    class TestAllow:
        """SUT: SlidingWindowRateLimiter.allow"""

        def test_cap_then_block(self, limiter):
            """Three quick calls pass, the fourth is refused."""
            assert [limiter.allow("1.2.3.4", now=t) for t in (0, 1, 2)] == [True, True, True]
            assert limiter.allow("1.2.3.4", now=3) is False

        def test_window_slides(self, limiter):
            """Once the oldest request leaves the window a call passes again."""
            for t in (0, 1, 2):
                limiter.allow("k", now=t)
            assert limiter.allow("k", now=59) is False
            assert limiter.allow("k", now=60) is True
            assert limiter.allow("k", now=60.5) is False

        def test_refused_calls_are_not_counted(self, limiter):
            for t in (0, 1, 2):
                limiter.allow("k", now=t)
            for t in range(3, 50):
                limiter.allow("k", now=t)
            assert limiter.allow("k", now=61) is True

        def test_keys_are_independent(self, limiter):
            for t in (0, 1, 2):
                limiter.allow("a", now=t)
            assert limiter.allow("a", now=3) is False
            assert limiter.allow("b", now=3) is True

    class TestRetryAfter:
        """SUT: SlidingWindowRateLimiter.retry_after / check"""

        def test_zero_when_allowed(self, limiter):
            assert limiter.retry_after("k", now=0) == 0

        def test_seconds_until_oldest_expires(self, limiter):
            for t in (10, 20, 30):
                limiter.allow("k", now=t)
            assert limiter.retry_after("k", now=35) == 35
            assert limiter.retry_after("k", now=69.5) == 1

        def test_check(self, limiter):
            for t in (0, 1, 2):
                assert limiter.check("k", now=t) == (True, None)
            assert limiter.check("k", now=30) == (False, 30)

    class TestEviction:
        """SUT: SlidingWindowRateLimiter.evict_stale"""

        def test_evicts_idle_keys(self, limiter):
            limiter.allow("old", now=0)
            limiter.allow("fresh", now=100)
            assert limiter.evict_stale(now=100) == 1
            assert len(limiter) == 1

        def test_bounded_key_count(self):
            """Stale keys are dropped once the key cap is reached."""
            limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=10, max_keys=2)
            limiter.allow("a", now=0)
            limiter.allow("b", now=1)
            limiter.allow("c", now=20)
            assert len(limiter) == 1

        def test_reset(self, limiter):
            limiter.allow("a", now=0)
            limiter.allow("b", now=0)
            limiter.reset("a")
            assert len(limiter) == 1
            limiter.reset()
            assert len(limiter) == 0

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            SlidingWindowRateLimiter(max_requests=0, window_seconds=60)
        with pytest.raises(ValueError):
            SlidingWindowRateLimiter(max_requests=1, window_seconds=0)
