"""In-memory, time-bounded cache of metadata records keyed by request URL."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from link2json.schemas.metadata import MetadataRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60


@dataclass
class _Entry:
    record: MetadataRecord
    expires_at: float


class ResponseCache:
    """
    URL -> MetadataRecord with a fixed TTL from insertion.

    Records are copied in and out, so callers can stamp per-request fields
    (duration) on what they get back without touching the stored value.
    Expired entries are never returned by `get`, even before a sweep.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, url: str) -> MetadataRecord | None:
        with self._lock:
            entry = self._entries.get(url)
            if entry is None or entry.expires_at <= self._clock():
                return None
            return entry.record.model_copy(deep=True)

    def set(self, url: str, record: MetadataRecord) -> None:
        entry = _Entry(record.model_copy(deep=True), self._clock() + self.ttl)
        with self._lock:
            self._entries[url] = entry

    def delete_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [url for url, entry in self._entries.items() if entry.expires_at <= now]
            for url in expired:
                del self._entries[url]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    async def run_janitor(self) -> None:
        """Purge expired entries every `sweep_interval` seconds until cancelled."""
        while True:
            await asyncio.sleep(self.sweep_interval)
            removed = self.delete_expired()
            if removed:
                logger.debug("Cache sweep removed %d expired entries", removed)
