from __future__ import annotations

from typing import List

from .clock import SleepingClock
from .events import EventRecorder
from .models import CALLER, LIMITER


class FakeSleepingClock(SleepingClock):
    """Virtual clock that advances only when asked to and never really sleeps.

    Sleeps requested by the rate limiter are recorded as "R" events, sleeps
    requested by the test through sleep_millis() as "U" events. For example
    R0.60 is a 0.6 second delay caused by the rate limiter and U1.00 means
    the test made the clock sleep for a second."""

    def __init__(self) -> None:
        self._instant = 0
        self._events = EventRecorder()

    def current_instant(self) -> int:
        return self._instant

    def sleep_micros_uninterruptibly(self, micros: int) -> None:
        self.sleep_micros(LIMITER, micros)

    def sleep_millis(self, millis: int) -> None:
        self.sleep_micros(CALLER, int(millis) * 1000)

    def sleep_micros(self, origin: str, micros: int) -> None:
        """Advance the instant by micros and record a tagged event."""
        micros = int(micros)
        if micros < 0:
            raise ValueError(f"Cannot move the clock backwards: {micros} micros")
        self._instant += micros * 1000
        self._events.record(origin, micros)

    def read_events_and_clear(self) -> List[str]:
        return self._events.drain_and_clear()

    @property
    def events(self) -> EventRecorder:
        return self._events

    def __repr__(self) -> str:
        return f"FakeSleepingClock(instant={self._instant}, events={self._events!r})"
