from __future__ import annotations

from dataclasses import dataclass

LIMITER = "R"
CALLER = "U"


@dataclass(frozen=True)
class DelayEvent:
    origin: str
    micros: int


@dataclass(frozen=True)
class Grant:
    instant_nanos: int
    permits: int
    wait_micros: int


@dataclass(frozen=True)
class ThrottleSnapshot:
    window_secs: float
    total_acquisitions: int
    total_permits: int
    throttled_count: int
    total_wait_secs: float
    max_wait_secs: float
    avg_wait_secs: float
    timestamp_nanos: int
