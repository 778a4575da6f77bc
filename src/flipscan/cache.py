"""flipscan Cache - In-memory analysis result caching.

Maps a content fingerprint to the AnalysisResult computed for that content.
Entries are written on miss and dropped in bulk by clear(); nothing is ever
updated in place, so a lookup either returns exactly what the matcher stored
or nothing. The cache has no staleness detection of its own: callers that
watch the filesystem must call clear() when files change.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flipscan.config import CacheConfig
    from flipscan.matcher import AnalysisResult

logger = logging.getLogger(__name__)


class ResultCache:
    """Thread-safe fingerprint -> AnalysisResult mapping.

    Unbounded unless max_entries is set, in which case the oldest entry is
    evicted on insert.
    """

    def __init__(self, enabled: bool = True, max_entries: int = 0) -> None:
        """Initialize the cache.

        Args:
            enabled: When False every lookup misses and stores are dropped
            max_entries: Maximum number of entries kept (0 = unbounded)
        """
        self.enabled = enabled
        self.max_entries = max_entries
        self._entries: OrderedDict[str, AnalysisResult] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_config(cls, config: CacheConfig) -> ResultCache:
        """Create a cache from configuration."""
        return cls(enabled=config.enabled, max_entries=config.max_entries)

    def get(self, fingerprint: str) -> AnalysisResult | None:
        """Get the cached result for a fingerprint.

        Returns:
            The stored result, or None on a miss
        """
        if not self.enabled:
            return None

        with self._lock:
            result = self._entries.get(fingerprint)
            if result is None:
                self._misses += 1
            else:
                self._hits += 1

        if result is not None:
            logger.debug(f"Cache hit: {fingerprint}")
        return result

    def set(self, fingerprint: str, result: AnalysisResult) -> None:
        """Store a result. Last writer wins for a given fingerprint."""
        if not self.enabled:
            return

        with self._lock:
            self._entries[fingerprint] = result
            if self.max_entries and len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cache entry: {evicted}")

    def clear(self) -> int:
        """Drop all entries and reset hit/miss counters.

        Returns:
            Number of entries dropped
        """
        with self._lock:
            cleared = len(self._entries)
            self._entries.clear()
            self._hits = 0
            self._misses = 0

        if cleared:
            logger.debug(f"Cleared {cleared} cached results")
        return cleared

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            entries = len(self._entries)
            hits = self._hits
            misses = self._misses

        total_requests = hits + misses
        hit_rate = (hits / total_requests * 100) if total_requests > 0 else 0.0
        return {
            "enabled": self.enabled,
            "entries": entries,
            "max_entries": self.max_entries,
            "hits": hits,
            "misses": misses,
            "hit_rate_percent": round(hit_rate, 1),
        }

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["ResultCache"]
