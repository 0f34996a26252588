"""
clock.py — Time source shared by the in-memory stores.

Cooldowns and TTLs are measured against a Clock rather than calling
time.monotonic() directly, so tests can advance time deterministically:

    clock = ManualClock()
    tracker = AvailabilityTracker(clock=clock)
    clock.advance(61)
"""

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Current time in seconds. Only differences are meaningful."""
        ...


class MonotonicClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


system_clock = MonotonicClock()
