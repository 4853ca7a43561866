"""Tests for the SystemClock class."""

import time
import unittest

from steadyrate.clock import SYSTEM_CLOCK, SleepingClock, SystemClock


class TestSystemClock(unittest.TestCase):
    """Verify the real clock reads and sleeps."""

    def test_is_a_sleeping_clock(self):
        self.assertIsInstance(SYSTEM_CLOCK, SleepingClock)

    def test_instant_is_monotonic(self):
        clock = SystemClock()
        readings = [clock.current_instant() for _ in range(100)]
        self.assertEqual(readings, sorted(readings))

    def test_sleep_blocks_for_duration(self):
        """Sleeping 50ms should take at least roughly that long."""
        clock = SystemClock()
        start = clock.current_instant()
        clock.sleep_micros_uninterruptibly(50_000)
        self.assertGreaterEqual(clock.current_instant() - start, 45_000_000)

    def test_non_positive_sleep_returns_immediately(self):
        clock = SystemClock()
        start = time.perf_counter()
        clock.sleep_micros_uninterruptibly(0)
        clock.sleep_micros_uninterruptibly(-1_000_000)
        self.assertLess(time.perf_counter() - start, 0.05)

    def test_cannot_instantiate_interface(self):
        with self.assertRaises(TypeError):
            SleepingClock()


if __name__ == "__main__":
    unittest.main()
