from __future__ import annotations

import math
import threading
from abc import ABC, abstractmethod
from typing import Optional

from .clock import SYSTEM_CLOCK, SleepingClock
from .errors import InvalidConfigurationError
from .metrics import AcquisitionMetrics

_MICROS_PER_SECOND = 1_000_000


class RateLimiter(ABC):
    """Thread-safe smoothed token-bucket rate limiter bound to a SleepingClock.

    Permits are handed out at a steady rate, one every stable interval.
    Idle time is banked as stored permits (up to max_permits) which later
    acquisitions spend first. The cost of a request is paid by the *next*
    caller: acquire() only waits for reservations made before it, so a lone
    request for many permits is granted at once and throttles whoever comes
    after it.

    Use RateLimiter.create() or RateLimiter.create_warming_up() to build one."""

    def __init__(self, clock: SleepingClock, metrics: Optional[AcquisitionMetrics] = None) -> None:
        self._clock = clock
        self._metrics = metrics
        self._lock = threading.Lock()
        self._offset_nanos = clock.current_instant()

        # Infinite until set_rate(), so idle time before that banks nothing.
        self._stable_interval_micros = math.inf
        self._stored_permits = 0.0
        self._max_permits = 0.0
        # Instant (micros past the offset) at which the next permit is free.
        self._next_free_micros = 0

    @staticmethod
    def create(
        permits_per_second: float,
        clock: SleepingClock = SYSTEM_CLOCK,
        max_burst_seconds: float = 1.0,
        metrics: Optional[AcquisitionMetrics] = None,
    ) -> RateLimiter:
        """Build a limiter that may burst up to max_burst_seconds worth of permits."""
        if not (max_burst_seconds >= 0 and math.isfinite(max_burst_seconds)):
            raise InvalidConfigurationError(f"max_burst_seconds must be >= 0 and finite: {max_burst_seconds}")
        limiter = SmoothBursty(clock, max_burst_seconds, metrics)
        limiter.set_rate(permits_per_second)
        return limiter

    @staticmethod
    def create_warming_up(
        permits_per_second: float,
        warmup_secs: float,
        clock: SleepingClock = SYSTEM_CLOCK,
        metrics: Optional[AcquisitionMetrics] = None,
    ) -> RateLimiter:
        """Build a limiter that starts cold and reaches its stable rate after warmup_secs."""
        if not (warmup_secs > 0 and math.isfinite(warmup_secs)):
            raise InvalidConfigurationError(f"warmup_secs must be > 0 and finite: {warmup_secs}")
        warmup_micros = int(warmup_secs * _MICROS_PER_SECOND)
        if warmup_micros <= 0:
            raise InvalidConfigurationError(f"warmup_secs must be at least one microsecond: {warmup_secs}")
        limiter = SmoothWarmingUp(clock, warmup_micros, metrics)
        limiter.set_rate(permits_per_second)
        return limiter

    def set_rate(self, permits_per_second: float) -> None:
        """Change the stable rate. Permits already reserved keep their old price."""
        _check_rate(permits_per_second)
        with self._lock:
            self._resync(self._read_micros())
            self._stable_interval_micros = _MICROS_PER_SECOND / permits_per_second
            self._do_set_rate(permits_per_second, self._stable_interval_micros)

    @property
    def rate(self) -> float:
        with self._lock:
            return _MICROS_PER_SECOND / self._stable_interval_micros

    def acquire(self, permits: int = 1) -> float:
        """Block until the permits may be used; return the seconds spent waiting."""
        _check_permits(permits)
        with self._lock:
            now_micros = self._read_micros()
            micros_to_wait = self._reserve(permits, now_micros)
        self._granted(now_micros, permits, micros_to_wait)
        return micros_to_wait / _MICROS_PER_SECOND

    def try_acquire(self, permits: int = 1, timeout_secs: float = 0.0) -> bool:
        """Acquire the permits only if that takes no longer than timeout_secs.

        Returns False right away, without reserving anything, when the next
        permit becomes free later than now + timeout_secs. An infinite
        timeout always grants, waiting as long as needed."""
        _check_permits(permits)
        if math.isnan(timeout_secs):
            raise ValueError("timeout_secs must be a number, not NaN")
        unbounded = math.isinf(timeout_secs) and timeout_secs > 0
        timeout_micros = 0 if unbounded else int(max(timeout_secs, 0) * _MICROS_PER_SECOND)
        with self._lock:
            now_micros = self._read_micros()
            if not unbounded and self._next_free_micros > now_micros + timeout_micros:
                return False
            micros_to_wait = self._reserve(permits, now_micros)
        self._granted(now_micros, permits, micros_to_wait)
        return True

    def _granted(self, now_micros: int, permits: int, micros_to_wait: int) -> None:
        if self._metrics is not None:
            instant = self._offset_nanos + (now_micros + micros_to_wait) * 1000
            self._metrics.record_grant(instant, permits, micros_to_wait)
        if micros_to_wait > 0:
            self._clock.sleep_micros_uninterruptibly(micros_to_wait)

    def _read_micros(self) -> int:
        return (self._clock.current_instant() - self._offset_nanos) // 1000

    def _reserve(self, permits: int, now_micros: int) -> int:
        """Book the permits and return the micros the caller still has to wait."""
        self._resync(now_micros)
        micros_to_next_free = max(0, self._next_free_micros - now_micros)
        stored_to_spend = min(float(permits), self._stored_permits)
        fresh_permits = permits - stored_to_spend

        wait_micros = self._stored_permits_to_wait_time(self._stored_permits, stored_to_spend) + int(
            fresh_permits * self._stable_interval_micros
        )
        self._next_free_micros += wait_micros
        self._stored_permits -= stored_to_spend
        return micros_to_next_free

    def _resync(self, now_micros: int) -> None:
        # Bank the idle time since the next free instant, capped at max_permits.
        if now_micros > self._next_free_micros:
            accrued = (now_micros - self._next_free_micros) / self._stable_interval_micros
            self._stored_permits = min(self._max_permits, self._stored_permits + accrued)
            self._next_free_micros = now_micros

    @abstractmethod
    def _do_set_rate(self, permits_per_second: float, stable_interval_micros: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def _stored_permits_to_wait_time(self, stored_permits: float, permits_to_take: float) -> int:
        """Micros it costs to spend permits_to_take out of stored_permits."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"RateLimiter[stable_rate={self.rate:.1f}qps]"


class SmoothBursty(RateLimiter):
    """Stored permits are free: after idling, up to max_burst_seconds of
    permits can be taken at once. The bucket starts empty."""

    def __init__(self, clock: SleepingClock, max_burst_seconds: float, metrics: Optional[AcquisitionMetrics] = None) -> None:
        super().__init__(clock, metrics)
        self._max_burst_seconds = max_burst_seconds

    def _do_set_rate(self, permits_per_second: float, stable_interval_micros: float) -> None:
        old_max_permits = self._max_permits
        self._max_permits = self._max_burst_seconds * permits_per_second
        if old_max_permits == 0.0:
            self._stored_permits = 0.0
        else:
            self._stored_permits = self._stored_permits * self._max_permits / old_max_permits

    def _stored_permits_to_wait_time(self, stored_permits: float, permits_to_take: float) -> int:
        return 0


class SmoothWarmingUp(RateLimiter):
    """Starts cold: stored permits above the half-way mark cost more than the
    stable interval, up to three times it when the bucket is full.

    Spending from a full bucket down to half takes warmup_micros on its own,
    after which permits flow at the stable rate. Idling for the warm-up
    period refills the bucket and the limiter is cold again."""

    def __init__(self, clock: SleepingClock, warmup_micros: int, metrics: Optional[AcquisitionMetrics] = None) -> None:
        super().__init__(clock, metrics)
        self._warmup_micros = warmup_micros
        self._half_permits = 0.0
        self._slope = 0.0

    def _do_set_rate(self, permits_per_second: float, stable_interval_micros: float) -> None:
        old_max_permits = self._max_permits
        self._max_permits = self._warmup_micros / stable_interval_micros
        self._half_permits = self._max_permits / 2.0
        cold_interval_micros = stable_interval_micros * 3.0
        self._slope = (cold_interval_micros - stable_interval_micros) / self._half_permits
        if old_max_permits == 0.0:
            self._stored_permits = self._max_permits
        else:
            self._stored_permits = self._stored_permits * self._max_permits / old_max_permits

    def _stored_permits_to_wait_time(self, stored_permits: float, permits_to_take: float) -> int:
        above_half = stored_permits - self._half_permits
        micros = 0
        if above_half > 0.0:
            above_half_to_take = min(above_half, permits_to_take)
            # trapezoid between the interval at the current level and the level after taking
            micros = int(
                above_half_to_take
                * (self._permits_to_time(above_half) + self._permits_to_time(above_half - above_half_to_take))
                / 2.0
            )
            permits_to_take -= above_half_to_take
        micros += int(self._stable_interval_micros * permits_to_take)
        return micros

    def _permits_to_time(self, permits: float) -> float:
        return self._stable_interval_micros + permits * self._slope


def _check_rate(permits_per_second: float) -> None:
    # A subnormal rate would make the stable interval overflow to infinity.
    if not (
        permits_per_second > 0
        and math.isfinite(permits_per_second)
        and math.isfinite(_MICROS_PER_SECOND / permits_per_second)
    ):
        raise InvalidConfigurationError(f"permits_per_second must be positive and finite: {permits_per_second}")


def _check_permits(permits: int) -> None:
    if not isinstance(permits, int):
        raise TypeError(f"Requested permits must be a whole number: {permits!r}")
    if permits < 1:
        raise ValueError(f"Requested permits must be positive: {permits}")
