"""Deterministic rate limiting package.

Provides a smoothed token-bucket rate limiter bound to a pluggable clock,
plus a virtual clock and test harness that record every simulated delay.

Key modules:
    clock           -- SleepingClock interface and the real SystemClock
    rate_limiter    -- RateLimiter with SmoothBursty and SmoothWarmingUp variants
    fake_clock      -- FakeSleepingClock virtual clock for tests
    events          -- EventRecorder for tagged delay events
    fake_limiter    -- FakeRateLimiter harness (limiter + virtual clock)
    metrics         -- AcquisitionMetrics for grant statistics
    models          -- DelayEvent, Grant, ThrottleSnapshot dataclasses
    session         -- ThrottledSession for rate-limited HTTP calls
    errors          -- InvalidConfigurationError
"""

from .clock import SYSTEM_CLOCK, SleepingClock, SystemClock
from .errors import InvalidConfigurationError
from .fake_clock import FakeSleepingClock
from .fake_limiter import FakeRateLimiter
from .rate_limiter import RateLimiter

__all__ = [
    "SYSTEM_CLOCK",
    "SleepingClock",
    "SystemClock",
    "InvalidConfigurationError",
    "FakeSleepingClock",
    "FakeRateLimiter",
    "RateLimiter",
]
