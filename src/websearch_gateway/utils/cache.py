"""In-memory cache for search results, bounded by size and age."""

import time
from collections.abc import Callable
from dataclasses import dataclass

from websearch_gateway.types.search import SearchResult
from websearch_gateway.utils.logging import setup_logger

logger = setup_logger(__name__)


@dataclass(slots=True)
class CacheEntry:
    """Cached result list and the clock reading when it was stored."""

    data: list[SearchResult]
    timestamp: float


class SearchResultCache:
    """Process-lifetime cache for search results.

    Entries expire ``ttl_seconds`` after insertion; expiry is only noticed on
    read. When the cache is full the oldest *inserted* entry is dropped to make
    room, regardless of how recently it was read.
    """

    def __init__(
        self,
        max_size: int = 100,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the search cache.

        Args:
            max_size: Maximum number of entries kept at once
            ttl_seconds: Time-to-live for each entry in seconds
            clock: Monotonic time source, injectable for tests
        """
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # dicts keep insertion order, which is the eviction order
        self._entries: dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(query: str, max_results: int) -> str:
        """Cache key from query parameters, e.g. ``"python asyncio_5"``."""
        return f"{query.lower()}_{max_results}"

    def get(self, key: str) -> list[SearchResult] | None:
        """Retrieve cached results.

        Returns:
            Cached results if the entry exists and is fresh, None otherwise
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("Cache miss", extra={"cache_key": key})
            return None

        if self._clock() - entry.timestamp >= self.ttl_seconds:
            logger.debug("Cache expired", extra={"cache_key": key})
            del self._entries[key]
            return None

        return entry.data

    def set(self, key: str, results: list[SearchResult]) -> None:
        """Store results, evicting the oldest entry first when full.

        Re-setting an existing key replaces it in place.
        """
        if key not in self._entries and len(self._entries) >= self.max_size:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]
            logger.debug("Evicted oldest cache entry", extra={"cache_key": oldest_key})

        self._entries[key] = CacheEntry(data=list(results), timestamp=self._clock())
        logger.info(
            "Cached search results",
            extra={"cache_key": key, "num_results": len(results)},
        )

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
