"""Tests for RateLimiter class."""

import threading
import time

from competitions.main import RateLimiter, refresh_rate_limiter
from competitions import config


class TestRateLimiter:
    """Tests for RateLimiter functionality."""

    def test_rate_limiter_init_default(self):
        """Initialize with default cooldown."""
        limiter = RateLimiter()
        assert limiter.cooldown_seconds == 300  # Default 5 minutes

    def test_refresh_limiter_uses_config(self):
        assert refresh_rate_limiter.cooldown_seconds == config.REFRESH_COOLDOWN_SECONDS

    def test_try_acquire_first_request(self):
        """First request is allowed."""
        limiter = RateLimiter(cooldown_seconds=10)

        allowed, wait_seconds = limiter.try_acquire()

        assert allowed is True
        assert wait_seconds == 0

    def test_try_acquire_returns_wait_seconds(self):
        """Returns remaining wait time when blocked."""
        limiter = RateLimiter(cooldown_seconds=10)

        limiter.try_acquire()
        allowed, wait_seconds = limiter.try_acquire()

        assert allowed is False
        assert 0 < wait_seconds <= 10

    def test_try_acquire_after_cooldown(self):
        """Request allowed after cooldown expires."""
        limiter = RateLimiter(cooldown_seconds=1)  # Short cooldown for testing

        allowed1, _ = limiter.try_acquire()
        assert allowed1 is True

        time.sleep(1.1)

        allowed2, wait2 = limiter.try_acquire()
        assert allowed2 is True
        assert wait2 == 0

    def test_reset_clears_state(self):
        """Reset allows immediate request."""
        limiter = RateLimiter(cooldown_seconds=10)

        limiter.try_acquire()
        allowed_before_reset, _ = limiter.try_acquire()
        assert allowed_before_reset is False

        limiter.reset()

        allowed_after_reset, wait = limiter.try_acquire()
        assert allowed_after_reset is True
        assert wait == 0

    def test_try_acquire_thread_safe(self):
        """Concurrent access works correctly."""
        limiter = RateLimiter(cooldown_seconds=5)
        results = []

        def acquire():
            results.append(limiter.try_acquire())

        threads = [threading.Thread(target=acquire) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        allowed_count = sum(1 for allowed, _ in results if allowed)
        assert allowed_count == 1, "Only one thread should acquire the rate limit"

        blocked = [wait for allowed, wait in results if not allowed]
        assert all(wait > 0 for wait in blocked), "Blocked requests should have wait times"
