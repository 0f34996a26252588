"""
analysis_store.py — Progress and results of background analyses.

The front-end polls GET /api/v1/progress/{analysis_id} while the analysis
runs, then fetches the report from GET /api/v1/analyze/{analysis_id}.

Entries live in process memory and expire `ttl_seconds` after their last
update (the upload TTL by default). Expiry is checked lazily on every access,
the same way FileStore does it. Unknown ids are answered with a stage-0
placeholder that is never stored.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from pratyaksh.core.clock import Clock, system_clock
from pratyaksh.core.config import settings
from pratyaksh.models.analysis import AnalysisOutcome, ProgressResponse

logger = logging.getLogger(__name__)

# Stage numbers shown by the progress tracker UI.
STAGES = {
    1: "Uploading file...",
    2: "Initializing analysis engine...",
    3: "Analyzing media signatures...",
    4: "Cross-referencing consistency markers...",
    5: "Compiling final report...",
}
STAGE_COMPLETE = 6


@dataclass
class AnalysisEntry:
    progress: ProgressResponse
    expires_at: float
    result: Optional[AnalysisOutcome] = None


class AnalysisStore:
    def __init__(self, ttl_seconds: float = settings.file_ttl_seconds, clock: Clock = system_clock) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, AnalysisEntry] = {}
        self._lock = threading.Lock()

    def _purge_expired(self) -> None:
        now = self._clock.now()
        expired = [aid for aid, e in self._entries.items() if e.expires_at <= now]
        for aid in expired:
            del self._entries[aid]
        if expired:
            logger.debug("Expired %d analysis record(s)", len(expired))

    def get_progress(self, analysis_id: str) -> ProgressResponse:
        """Current progress; unknown ids report stage 0 without being recorded."""
        with self._lock:
            self._purge_expired()
            entry = self._entries.get(analysis_id)
        if entry is None:
            return ProgressResponse(stage=0, message="Initializing...", completed=False)
        return entry.progress

    def advance(self, analysis_id: str, stage: int) -> None:
        self._set(analysis_id, ProgressResponse(stage=stage, message=STAGES[stage], completed=False))

    def complete(self, analysis_id: str, outcome: AnalysisOutcome) -> None:
        progress = ProgressResponse(stage=STAGE_COMPLETE, message="Analysis complete", completed=True)
        self._set(analysis_id, progress, result=outcome)

    def fail(self, analysis_id: str, message: str = "Analysis failed") -> None:
        self._set(analysis_id, ProgressResponse(stage=0, message=message, completed=True, failed=True))

    def get_result(self, analysis_id: str) -> Optional[AnalysisOutcome]:
        with self._lock:
            self._purge_expired()
            entry = self._entries.get(analysis_id)
        return entry.result if entry else None

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def _set(
        self,
        analysis_id: str,
        progress: ProgressResponse,
        result: Optional[AnalysisOutcome] = None,
    ) -> None:
        """Replace the progress (and result, when given); every write restarts the TTL."""
        with self._lock:
            self._purge_expired()
            self._entries[analysis_id] = AnalysisEntry(
                progress=progress,
                expires_at=self._clock.now() + self.ttl_seconds,
                result=result,
            )


analysis_store = AnalysisStore()
