"""In-memory analysis result cache.

Owned by whoever hosts the engine (the API creates one per app); the
engine itself never caches.
"""

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass

from headerguard.analyzers.models import AnalysisResult

logger = logging.getLogger(__name__)


@dataclass
class CachedAnalysis:
    result: AnalysisResult
    stored_at: float
    hit_count: int = 0


class AnalysisCache:
    """Manages caching of URL analysis results."""

    def __init__(
        self, ttl_seconds: int = 3600, max_entries: int = 1024, clock=time.monotonic
    ):
        """
        Initialize cache with TTL (Time To Live).

        Args:
            ttl_seconds: Entry lifetime in seconds
            max_entries: Oldest entries are evicted beyond this size
            clock: Monotonic time source, injectable for tests
        """
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CachedAnalysis] = OrderedDict()

    @staticmethod
    def generate_key(normalized_url: str, platforms: tuple[str, ...] = ()) -> str:
        """Generate a consistent cache key for a URL and platform selection."""
        raw = normalized_url + "|" + ",".join(platforms)
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def get(
        self, normalized_url: str, platforms: tuple[str, ...] = ()
    ) -> CachedAnalysis | None:
        """Return a non-expired cached analysis, or None."""
        key = self.generate_key(normalized_url, platforms)
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache MISS for URL: {normalized_url}")
            return None

        if self._clock() - entry.stored_at > self.ttl_seconds:
            del self._entries[key]
            logger.debug(f"Cache EXPIRED for URL: {normalized_url}")
            return None

        entry.hit_count += 1
        self._entries.move_to_end(key)
        logger.debug(f"Cache HIT for URL: {normalized_url}")
        return entry

    def store(
        self,
        normalized_url: str,
        result: AnalysisResult,
        platforms: tuple[str, ...] = (),
    ) -> None:
        key = self.generate_key(normalized_url, platforms)
        self._entries[key] = CachedAnalysis(result=result, stored_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
