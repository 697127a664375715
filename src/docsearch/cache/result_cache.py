"""TTL cache of search result pages.

Expiry is enforced in two independent ways: ``get`` deletes an expired
entry when it reads one, and ``cleanup_expired`` sweeps every expired entry
on demand. Search correctness never depends on the cache: backend failures
on the read/write path are logged and treated as a miss or a skipped write.
"""

import logging
import time
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable

from pydantic import ValidationError

from docsearch.cache.backend import CacheBackend
from docsearch.errors import CacheBackendError
from docsearch.models.cache import CacheEntry, CacheStats, QueryCount, WarmupReport
from docsearch.models.search import PagedSearchResult

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ResultCache:
    """Key/value cache of PagedSearchResult values with per-entry TTL.

    Usage:
        cache = ResultCache(MemoryCacheBackend(), default_ttl=600)
        await cache.set(key, "invoice", result)
        hit = await cache.get(key)
    """

    # Default TTL: 1 hour
    DEFAULT_TTL = 3600

    def __init__(
        self,
        backend: CacheBackend,
        default_ttl: int = DEFAULT_TTL,
        clock: Clock = time.time,
    ):
        """Initialize the cache.

        Args:
            backend: Storage medium for entries.
            default_ttl: TTL in seconds used when ``set`` gets none.
            clock: Source of "now" in epoch seconds; replaceable in tests.
        """
        self.backend = backend
        self.default_ttl = default_ttl
        self._clock = clock

    async def get(self, key: str) -> PagedSearchResult | None:
        """Return the cached page, or None if absent, expired or unreadable.

        Reading an expired or undecodable entry deletes it.
        """
        try:
            entry = await self.backend.load(key)
        except CacheBackendError:
            logger.warning("Cache read failed for %s, treating as miss", key, exc_info=True)
            return None
        except ValidationError:
            logger.warning("Discarding undecodable cache entry %s", key)
            await self._discard(key)
            return None

        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            logger.debug("Cache entry %s expired", key)
            await self._discard(key)
            return None
        return entry.results

    async def set(
        self,
        key: str,
        query_text: str,
        result: PagedSearchResult,
        ttl: int | None = None,
    ) -> bool:
        """Store a page, replacing any previous entry for ``key``.

        Returns:
            True if the entry was written.
        """
        now = self._clock()
        entry = CacheEntry(
            key=key,
            query_text=query_text,
            results=result,
            created_at=now,
            expires_at=now + (ttl if ttl is not None else self.default_ttl),
        )
        try:
            await self.backend.store(entry)
        except CacheBackendError:
            logger.warning("Cache write failed for %s", key, exc_info=True)
            return False
        return True

    async def delete(self, key: str) -> bool:
        """Remove one entry."""
        return await self.backend.delete(key)

    async def exists(self, key: str) -> bool:
        """True if ``key`` holds a live entry."""
        return await self.get(key) is not None

    async def cleanup_expired(self) -> int:
        """Delete every entry that has expired by now. Returns the count removed."""
        removed = await self.backend.delete_expired(self._clock())
        if removed:
            logger.info("Removed %d expired cache entries", removed)
        return removed

    async def clear(self) -> int:
        """Delete every entry."""
        removed = await self.backend.clear()
        logger.info("Cleared %d cache entries", removed)
        return removed

    async def invalidate_by_pattern(self, fragment: str) -> int:
        """Delete entries whose query text contains ``fragment``."""
        removed = await self.backend.delete_matching(fragment)
        logger.info("Invalidated %d cache entries matching %r", removed, fragment)
        return removed

    async def stats(self) -> CacheStats:
        """Counts of live and expired entries and the creation-time range."""
        entries = await self.backend.entries()
        now = self._clock()
        expired = sum(1 for e in entries if e.is_expired(now))
        created = [e.created_at for e in entries]
        return CacheStats(
            total_entries=len(entries),
            active_entries=len(entries) - expired,
            expired_entries=expired,
            oldest_entry=min(created) if created else None,
            newest_entry=max(created) if created else None,
        )

    async def popular_queries(self, limit: int = 10, days: int = 30) -> list[QueryCount]:
        """Query texts with the most cached pages created in the last ``days`` days."""
        since = self._clock() - days * 86400
        entries = [e for e in await self.backend.entries() if e.created_at >= since]
        counts = Counter(e.query_text for e in entries)
        latest: dict[str, float] = {}
        for e in entries:
            latest[e.query_text] = max(latest.get(e.query_text, 0.0), e.created_at)
        ranked = sorted(counts, key=lambda q: (-counts[q], -latest[q]))
        return [QueryCount(query_text=q, search_count=counts[q]) for q in ranked[:limit]]

    async def recent_queries(self, limit: int = 10) -> list[str]:
        """Distinct query texts, most recently cached first."""
        entries = sorted(await self.backend.entries(), key=lambda e: e.created_at, reverse=True)
        seen: list[str] = []
        for e in entries:
            if e.query_text not in seen:
                seen.append(e.query_text)
            if len(seen) >= limit:
                break
        return seen

    async def warmup(
        self,
        items: Iterable[tuple[str, str]],
        generator: Callable[[str], Awaitable[PagedSearchResult]],
        ttl: int | None = None,
    ) -> WarmupReport:
        """Populate missing entries by calling ``generator(key)``.

        Args:
            items: (key, query_text) pairs to make sure are cached.
            generator: Produces the page for a key; its errors are recorded,
                not raised.
            ttl: TTL for new entries (default: ``default_ttl``).
        """
        report = WarmupReport()
        for key, query_text in items:
            if await self.exists(key):
                report.skipped += 1
                continue
            try:
                result = await generator(key)
            except Exception as e:
                logger.warning("Warmup generator failed for %s", key, exc_info=True)
                report.failed += 1
                report.errors.append(f"Error generating data for key {key}: {e}")
                continue
            if await self.set(key, query_text, result, ttl):
                report.warmed += 1
            else:
                report.failed += 1
                report.errors.append(f"Failed to cache key: {key}")
        return report

    async def _discard(self, key: str) -> None:
        try:
            await self.backend.delete(key)
        except CacheBackendError:
            logger.warning("Could not delete cache entry %s", key, exc_info=True)
