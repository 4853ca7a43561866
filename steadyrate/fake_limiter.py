from __future__ import annotations

from typing import List, Optional

from .fake_clock import FakeSleepingClock
from .metrics import AcquisitionMetrics
from .rate_limiter import RateLimiter


class FakeRateLimiter:
    """A RateLimiter wired to a FakeSleepingClock, for deterministic tests.

    Drive the limiter through rate_limiter, simulate the test's own pauses
    with sleep_millis(), then assert on read_events_and_clear()."""

    def __init__(
        self,
        permits_per_second: float,
        max_burst_seconds: float = 1.0,
        warmup_secs: Optional[float] = None,
        metrics: Optional[AcquisitionMetrics] = None,
    ) -> None:
        self._clock = FakeSleepingClock()
        if warmup_secs is None:
            self._rate_limiter = RateLimiter.create(
                permits_per_second, clock=self._clock, max_burst_seconds=max_burst_seconds, metrics=metrics
            )
        else:
            self._rate_limiter = RateLimiter.create_warming_up(
                permits_per_second, warmup_secs, clock=self._clock, metrics=metrics
            )

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def clock(self) -> FakeSleepingClock:
        return self._clock

    def sleep_millis(self, millis: int) -> None:
        self._clock.sleep_millis(millis)

    def read_events_and_clear(self) -> List[str]:
        return self._clock.read_events_and_clear()
