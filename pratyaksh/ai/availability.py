"""
availability.py — Per-credential failure tracking with a cooldown window.

A credential is skipped once it has failed `max_failures` times and the last
failure is no older than `cooldown_seconds`. When the window has elapsed the
record is dropped on the next check and the credential is tried again.

Rate-limit failures count exactly like other failures; the flag only changes
what gets logged.

State is per instance and in memory only, so a restart clears all cooldowns.
A single lock guards the table; critical sections never await, so the
tracker is safe to share between concurrent requests and threads.
"""

import logging
import threading
from dataclasses import dataclass

from pratyaksh.core.clock import Clock, system_clock

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 60.0
DEFAULT_MAX_FAILURES = 3


@dataclass
class FailureRecord:
    count: int
    last_failure: float


class AvailabilityTracker:
    def __init__(
        self,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        max_failures: int = DEFAULT_MAX_FAILURES,
        clock: Clock = system_clock,
    ) -> None:
        self.cooldown_seconds = cooldown_seconds
        self.max_failures = max_failures
        self._clock = clock
        self._failures: dict[str, FailureRecord] = {}
        self._lock = threading.Lock()

    def is_available(self, credential_id: str) -> bool:
        with self._lock:
            record = self._failures.get(credential_id)
            if record is None:
                return True

            if self._clock.now() - record.last_failure > self.cooldown_seconds:
                del self._failures[credential_id]
                logger.info("Cooldown elapsed for %s, credential available again", credential_id)
                return True

            return record.count < self.max_failures

    def record_failure(self, credential_id: str, is_rate_limit: bool = False) -> None:
        with self._lock:
            record = self._failures.get(credential_id)
            now = self._clock.now()
            if record is None:
                record = self._failures[credential_id] = FailureRecord(count=0, last_failure=now)
            record.count += 1
            record.last_failure = now
            count = record.count

        if is_rate_limit:
            logger.warning(
                "%s rate limited (failure %d/%d), cooling down for %.0fs",
                credential_id, count, self.max_failures, self.cooldown_seconds,
            )
        else:
            logger.info("%s failure recorded (%d/%d)", credential_id, count, self.max_failures)

    def failure_count(self, credential_id: str) -> int:
        """Failures currently on record; does not apply the cooldown reset."""
        with self._lock:
            record = self._failures.get(credential_id)
            return record.count if record else 0

    def reset(self, credential_id: str) -> None:
        """Forget failures, e.g. after an administrator replaces the secret."""
        with self._lock:
            self._failures.pop(credential_id, None)

    def snapshot(self) -> dict[str, dict]:
        """Failure counts and seconds since last failure, for diagnostics."""
        with self._lock:
            now = self._clock.now()
            return {
                cid: {
                    "failures": rec.count,
                    "seconds_since_failure": round(now - rec.last_failure, 1),
                    "cooling_down": rec.count >= self.max_failures
                    and now - rec.last_failure <= self.cooldown_seconds,
                }
                for cid, rec in self._failures.items()
            }
