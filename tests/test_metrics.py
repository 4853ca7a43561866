"""Tests for the AcquisitionMetrics class."""

import unittest

from steadyrate.fake_limiter import FakeRateLimiter
from steadyrate.metrics import AcquisitionMetrics

SECOND = 1_000_000_000


class TestAcquisitionMetrics(unittest.TestCase):
    """Verify grant recording and snapshot aggregation."""

    def test_empty_snapshot(self):
        """Snapshot with no grants should have all zeros."""
        metrics = AcquisitionMetrics()
        snap = metrics.snapshot(window_secs=30, now_nanos=10 * SECOND)
        self.assertEqual(snap.total_acquisitions, 0)
        self.assertEqual(snap.total_permits, 0)
        self.assertEqual(snap.max_wait_secs, 0.0)
        self.assertEqual(snap.avg_wait_secs, 0.0)

    def test_records_grants(self):
        """Permits and waits are summed over the window."""
        metrics = AcquisitionMetrics()
        metrics.record_grant(0, 1, 0)
        metrics.record_grant(SECOND, 3, 500_000)
        metrics.record_grant(2 * SECOND, 2, 1_500_000)
        snap = metrics.snapshot(window_secs=30, now_nanos=2 * SECOND)
        self.assertEqual(snap.total_acquisitions, 3)
        self.assertEqual(snap.total_permits, 6)
        self.assertEqual(snap.throttled_count, 2)
        self.assertAlmostEqual(snap.total_wait_secs, 2.0)
        self.assertAlmostEqual(snap.max_wait_secs, 1.5)
        self.assertAlmostEqual(snap.avg_wait_secs, 2.0 / 3)
        self.assertEqual(snap.timestamp_nanos, 2 * SECOND)

    def test_window_excludes_old_grants(self):
        metrics = AcquisitionMetrics()
        metrics.record_grant(0, 1, 0)
        metrics.record_grant(5 * SECOND, 1, 0)
        metrics.record_grant(9 * SECOND, 1, 0)
        snap = metrics.snapshot(window_secs=5, now_nanos=10 * SECOND)
        self.assertEqual(snap.total_acquisitions, 2)

    def test_max_events_bounds_history(self):
        metrics = AcquisitionMetrics(max_events=2)
        for i in range(5):
            metrics.record_grant(i, 1, 0)
        self.assertEqual([g.instant_nanos for g in metrics.grants()], [3, 4])

    def test_export_json(self):
        """export_json should return all recorded grants as dicts."""
        metrics = AcquisitionMetrics()
        metrics.record_grant(7, 2, 100)
        exported = metrics.export_json()
        self.assertEqual(exported, [{"instant_nanos": 7, "permits": 2, "wait_micros": 100}])
        self.assertEqual(list(metrics.export_csv_rows()), exported)

    def test_limiter_reports_grants(self):
        """A limiter built with metrics records each successful acquisition."""
        metrics = AcquisitionMetrics()
        fake = FakeRateLimiter(2.0, metrics=metrics)
        limiter = fake.rate_limiter
        limiter.acquire()
        limiter.acquire()
        limiter.acquire()
        self.assertFalse(limiter.try_acquire())

        now = fake.clock.current_instant()
        snap = metrics.snapshot(window_secs=10, now_nanos=now)
        self.assertEqual(snap.total_acquisitions, 3)
        self.assertEqual(snap.throttled_count, 2)
        self.assertAlmostEqual(snap.total_wait_secs, 1.0)

        recent = metrics.snapshot(window_secs=0.5, now_nanos=now)
        self.assertEqual(recent.total_acquisitions, 2)


if __name__ == "__main__":
    unittest.main()
