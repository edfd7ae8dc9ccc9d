"""
East Village Everything — Login Throttle Tests
================================================

What we test:
    ✅ Attempts up to the limit pass, the next one is refused
    ✅ Retry-After counts down to when the oldest attempt leaves the window
    ✅ Old attempts expire; IPs are tracked independently
    ✅ reset() clears an IP after a successful login
"""

import pytest

from app.exceptions import RateLimitExceededError
from app.middleware.rate_limit import LoginThrottle


class FakeClock:

    def __init__(self, start=1_000.0):
        self.now = start

    def __call__(self):
        return self.now


class TestLoginThrottle:

    def setup_method(self):
        self.clock = FakeClock()
        self.throttle = LoginThrottle(max_attempts=3, window=60, clock=self.clock)

    def test_limit(self):
        for _ in range(3):
            self.throttle.hit("10.0.0.1")

        with pytest.raises(RateLimitExceededError) as exc_info:
            self.throttle.hit("10.0.0.1")
        assert exc_info.value.retry_after == 61

    def test_retry_after_shrinks(self):
        for _ in range(3):
            self.throttle.hit("10.0.0.1")
        self.clock.now += 30

        with pytest.raises(RateLimitExceededError) as exc_info:
            self.throttle.hit("10.0.0.1")
        assert exc_info.value.retry_after == 31

    def test_window_slides(self):
        for _ in range(3):
            self.throttle.hit("10.0.0.1")
        self.clock.now += 61

        self.throttle.hit("10.0.0.1")

    def test_ips_are_independent(self):
        for _ in range(3):
            self.throttle.hit("10.0.0.1")

        self.throttle.hit("10.0.0.2")

    def test_reset(self):
        for _ in range(3):
            self.throttle.hit("10.0.0.1")

        self.throttle.reset("10.0.0.1")

        self.throttle.hit("10.0.0.1")
        self.throttle.reset("never-seen")
