from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from .models import DelayEvent

_MICROS_PER_SECOND = Decimal(1_000_000)
_TWO_PLACES = Decimal("0.01")


def format_seconds(micros: int) -> str:
    """Render a microsecond count as seconds with exactly two decimals.

    Works on the exact decimal value of the integer count and rounds half up,
    so 1_125_000 renders as "1.13" rather than the binary-float "1.12"."""
    seconds = Decimal(int(micros)) / _MICROS_PER_SECOND
    return str(seconds.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def render_event(event: DelayEvent) -> str:
    """Render an event as <origin><seconds>, e.g. R0.50 or U1.00."""
    return f"{event.origin}{format_seconds(event.micros)}"


class EventRecorder:
    """Ordered log of simulated delays, tagged by who caused them.

    The recorder does not interpret tags; it keeps (origin, micros) pairs in
    insertion order until drained. Not thread-safe."""

    def __init__(self) -> None:
        self._events: List[DelayEvent] = []

    def record(self, origin: str, micros: int) -> None:
        """Append one delay event."""
        self._events.append(DelayEvent(origin=origin, micros=int(micros)))

    def drain_and_clear(self) -> List[str]:
        """Return the rendered events in order and empty the log."""
        try:
            return [render_event(e) for e in self._events]
        finally:
            self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"EventRecorder({[render_event(e) for e in self._events]!r})"
