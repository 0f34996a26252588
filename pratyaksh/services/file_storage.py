"""
file_storage.py — In-memory store for uploaded media awaiting analysis.

Files live only in process memory and expire `ttl_seconds` after they were
stored (30 minutes by default). Expiry is checked lazily on access and on
every store(), so no background timer is needed.
"""

import logging
import threading
from dataclasses import dataclass

from pratyaksh.core.clock import Clock, system_clock
from pratyaksh.core.config import settings
from pratyaksh.models.upload import FileMetadata

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    data: bytes
    metadata: FileMetadata
    expires_at: float


class FileStore:
    def __init__(self, ttl_seconds: float = settings.file_ttl_seconds, clock: Clock = system_clock) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._files: dict[str, StoredFile] = {}
        self._lock = threading.Lock()

    def _purge_expired(self) -> None:
        now = self._clock.now()
        expired = [fid for fid, f in self._files.items() if f.expires_at <= now]
        for fid in expired:
            del self._files[fid]
        if expired:
            logger.debug("Expired %d stored file(s)", len(expired))

    def store(self, file_id: str, data: bytes, metadata: FileMetadata) -> None:
        """Store (or replace) a file; replacing restarts its TTL."""
        with self._lock:
            self._purge_expired()
            self._files[file_id] = StoredFile(data, metadata, self._clock.now() + self.ttl_seconds)
        logger.info("Stored file %s, size: %d bytes", file_id, len(data))

    def get(self, file_id: str) -> StoredFile | None:
        with self._lock:
            self._purge_expired()
            stored = self._files.get(file_id)
        if stored is None:
            logger.info("File %s not found", file_id)
        return stored

    def delete(self, file_id: str) -> bool:
        with self._lock:
            deleted = self._files.pop(file_id, None) is not None
        if deleted:
            logger.info("Deleted file %s", file_id)
        return deleted

    def stats(self) -> dict[str, int]:
        with self._lock:
            self._purge_expired()
            return {
                "file_count": len(self._files),
                "total_size": sum(len(f.data) for f in self._files.values()),
            }


file_store = FileStore()
