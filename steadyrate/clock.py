from __future__ import annotations

import time
from abc import ABC, abstractmethod


class SleepingClock(ABC):
    """Time source consulted by the rate limiter.

    Exposes the current instant and a way to block the calling thread.
    Production code uses SystemClock; tests plug in FakeSleepingClock."""

    @abstractmethod
    def current_instant(self) -> int:
        """Return the current instant in nanoseconds (monotonic)."""
        raise NotImplementedError

    @abstractmethod
    def sleep_micros_uninterruptibly(self, micros: int) -> None:
        """Block the calling thread for the given number of microseconds."""
        raise NotImplementedError


class SystemClock(SleepingClock):
    """Real clock backed by time.monotonic_ns() and time.sleep()."""

    def current_instant(self) -> int:
        return time.monotonic_ns()

    def sleep_micros_uninterruptibly(self, micros: int) -> None:
        if micros <= 0:
            return
        # time.sleep resumes after signal handlers (PEP 475), so the full duration elapses
        time.sleep(micros / 1_000_000)


SYSTEM_CLOCK = SystemClock()
