from __future__ import annotations

from collections import deque
from dataclasses import asdict
from threading import Lock
from typing import Deque, Dict, Iterable, List

from .models import Grant, ThrottleSnapshot


class AcquisitionMetrics:
    """Thread-safe collector of permit grants.

    The rate limiter records one Grant per successful acquisition, stamped
    with the clock instant at which the caller got its permits. Snapshots
    aggregate the grants that fall inside a trailing time window."""

    def __init__(self, max_events: int = 10000) -> None:
        self._lock = Lock()
        self._grants: Deque[Grant] = deque(maxlen=max_events)

    def record_grant(self, instant_nanos: int, permits: int, wait_micros: int) -> None:
        """Record a grant of permits that made its caller wait wait_micros."""
        with self._lock:
            self._grants.append(Grant(instant_nanos=instant_nanos, permits=permits, wait_micros=wait_micros))

    def grants(self) -> List[Grant]:
        with self._lock:
            return list(self._grants)

    def snapshot(self, window_secs: float, now_nanos: int) -> ThrottleSnapshot:
        """Return aggregated statistics for grants within the last window_secs seconds."""
        cutoff = now_nanos - int(window_secs * 1_000_000_000)
        with self._lock:
            grants = [g for g in self._grants if cutoff <= g.instant_nanos <= now_nanos]
        total = len(grants)
        waits = [g.wait_micros / 1_000_000 for g in grants]
        total_wait = sum(waits)

        return ThrottleSnapshot(
            window_secs=window_secs,
            total_acquisitions=total,
            total_permits=sum(g.permits for g in grants),
            throttled_count=sum(1 for g in grants if g.wait_micros > 0),
            total_wait_secs=total_wait,
            max_wait_secs=max(waits, default=0.0),
            avg_wait_secs=(total_wait / total) if total else 0.0,
            timestamp_nanos=now_nanos,
        )

    def export_json(self) -> List[Dict]:
        """Export all recorded grants as a list of dictionaries."""
        with self._lock:
            return [asdict(g) for g in self._grants]

    def export_csv_rows(self) -> Iterable[Dict]:
        """Yield recorded grants as flat dictionaries suitable for CSV export."""
        with self._lock:
            rows = [asdict(g) for g in self._grants]
        yield from rows
