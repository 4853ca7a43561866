from __future__ import annotations

import argparse
import json
from typing import Optional

from steadyrate.errors import InvalidConfigurationError
from steadyrate.fake_limiter import FakeRateLimiter
from steadyrate.metrics import AcquisitionMetrics


DEFAULT_QPS = 2.0
DEFAULT_ACQUIRES = 5


def run_demo(
    qps: float,
    acquires: int,
    permits: int,
    burst_secs: float,
    warmup_secs: Optional[float],
    idle_ms: int,
) -> None:
    metrics = AcquisitionMetrics()
    fake = FakeRateLimiter(qps, max_burst_seconds=burst_secs, warmup_secs=warmup_secs, metrics=metrics)
    limiter = fake.rate_limiter

    # Idle first so a bursty limiter can bank permits (or a warming one stays cold)
    if idle_ms > 0:
        fake.sleep_millis(idle_ms)

    for i in range(acquires):
        waited = limiter.acquire(permits)
        print(f"acquire={i + 1} permits={permits} waited={waited:.2f}s")

    events = fake.read_events_and_clear()
    print(f"\nEVENTS: {' '.join(events) if events else '(none)'}")

    now = fake.clock.current_instant()
    snapshot = metrics.snapshot(window_secs=now / 1_000_000_000, now_nanos=now)
    summary = {
        "rate": limiter.rate,
        "elapsed_secs": now / 1_000_000_000,
        "total_acquisitions": snapshot.total_acquisitions,
        "total_permits": snapshot.total_permits,
        "throttled_count": snapshot.throttled_count,
        "total_wait_secs": round(snapshot.total_wait_secs, 6),
        "max_wait_secs": snapshot.max_wait_secs,
    }
    print(json.dumps(summary, ensure_ascii=False))


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Drive a rate limiter on a virtual clock and print its delays")

    parser.add_argument("--qps", type=float, default=DEFAULT_QPS, help="Stable permits per second")
    parser.add_argument("--acquires", type=int, default=DEFAULT_ACQUIRES, help="Number of acquire() calls")
    parser.add_argument("--permits", type=int, default=1, help="Permits requested per acquire() call")
    parser.add_argument("--burst-secs", type=float, default=1.0, help="Seconds of permits a bursty limiter may bank")
    parser.add_argument("--warmup-secs", type=float, default=None, help="Use a warming-up limiter with this period")
    parser.add_argument("--idle-ms", type=int, default=0, help="Simulated idle time before the first acquire")

    args = parser.parse_args(argv)

    try:
        run_demo(
            qps=args.qps,
            acquires=args.acquires,
            permits=args.permits,
            burst_secs=args.burst_secs,
            warmup_secs=args.warmup_secs,
            idle_ms=args.idle_ms,
        )
    except InvalidConfigurationError as exc:
        parser.error(str(exc))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
