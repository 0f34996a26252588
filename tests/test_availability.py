"""
Unit tests for AvailabilityTracker.

Time is driven by ManualClock; defaults are a 60 s cooldown and a
threshold of 3 failures.
"""

import threading

from pratyaksh.ai.availability import AvailabilityTracker
from pratyaksh.core.clock import ManualClock


def _tracker(clock: ManualClock) -> AvailabilityTracker:
    return AvailabilityTracker(cooldown_seconds=60, max_failures=3, clock=clock)


class TestThreshold:
    def test_unknown_credential_is_available(self, clock):
        assert _tracker(clock).is_available("key1") is True

    def test_available_below_threshold(self, clock):
        tracker = _tracker(clock)
        tracker.record_failure("key1")
        tracker.record_failure("key1")
        assert tracker.is_available("key1") is True
        assert tracker.failure_count("key1") == 2

    def test_unavailable_immediately_at_threshold(self, clock):
        tracker = _tracker(clock)
        for _ in range(3):
            tracker.record_failure("key1")
        assert tracker.is_available("key1") is False

    def test_failures_are_per_credential(self, clock):
        tracker = _tracker(clock)
        for _ in range(3):
            tracker.record_failure("key1")
        assert tracker.is_available("key2") is True

    def test_rate_limit_flag_counts_the_same(self, clock):
        tracker = _tracker(clock)
        tracker.record_failure("key1", is_rate_limit=True)
        tracker.record_failure("key1", is_rate_limit=False)
        tracker.record_failure("key1", is_rate_limit=True)
        assert tracker.failure_count("key1") == 3
        assert tracker.is_available("key1") is False


class TestCooldown:
    def test_available_again_after_window(self, clock):
        tracker = _tracker(clock)
        for _ in range(3):
            tracker.record_failure("key1")

        clock.advance(60.5)
        assert tracker.is_available("key1") is True
        # Record is discarded, not just ignored
        assert tracker.failure_count("key1") == 0

    def test_still_unavailable_at_exact_window(self, clock):
        tracker = _tracker(clock)
        for _ in range(3):
            tracker.record_failure("key1")

        clock.advance(60)
        assert tracker.is_available("key1") is False

    def test_window_measured_from_last_failure(self, clock):
        tracker = _tracker(clock)
        tracker.record_failure("key1")
        clock.advance(50)
        tracker.record_failure("key1")
        tracker.record_failure("key1")

        clock.advance(30)  # 80 s after the first failure, 30 s after the last
        assert tracker.is_available("key1") is False

        clock.advance(31)
        assert tracker.is_available("key1") is True

    def test_failure_after_expiry_starts_fresh(self, clock):
        tracker = _tracker(clock)
        for _ in range(3):
            tracker.record_failure("key1")
        clock.advance(61)
        assert tracker.is_available("key1") is True

        tracker.record_failure("key1")
        assert tracker.failure_count("key1") == 1
        assert tracker.is_available("key1") is True


class TestHousekeeping:
    def test_reset_clears_record(self, clock):
        tracker = _tracker(clock)
        for _ in range(3):
            tracker.record_failure("key1")
        tracker.reset("key1")
        assert tracker.is_available("key1") is True
        assert tracker.failure_count("key1") == 0

    def test_reset_unknown_is_noop(self, clock):
        _tracker(clock).reset("never-seen")

    def test_snapshot_reports_cooldown_state(self, clock):
        tracker = _tracker(clock)
        for _ in range(3):
            tracker.record_failure("key1")
        tracker.record_failure("key2")
        clock.advance(10)

        snap = tracker.snapshot()
        assert snap["key1"] == {"failures": 3, "seconds_since_failure": 10.0, "cooling_down": True}
        assert snap["key2"]["cooling_down"] is False
        assert "key3" not in snap

    def test_instances_do_not_share_state(self, clock):
        a, b = _tracker(clock), _tracker(clock)
        for _ in range(3):
            a.record_failure("key1")
        assert b.is_available("key1") is True


def test_concurrent_failures_are_all_counted():
    tracker = AvailabilityTracker(cooldown_seconds=60, max_failures=10_000, clock=ManualClock())

    def worker():
        for _ in range(500):
            tracker.record_failure("shared")
            tracker.is_available("shared")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert tracker.failure_count("shared") == 4000
