"""Search orchestration: cache lookup, ranked search, enhancement, cache write.

A search call reads the cache first. On a miss it builds the engine query,
fetches one ranked page, enhances the rows and writes the page back to the
cache. Metadata (timing, cache_hit) is produced per call and never cached.
Any error from the engine or enhancer aborts the call before anything is
written.
"""

import logging
import time
from collections.abc import Iterable

from docsearch.cache.keys import cache_key_for
from docsearch.cache.result_cache import ResultCache
from docsearch.models.cache import CacheStats, QueryCount, WarmupReport
from docsearch.models.search import (
    PagedSearchResult,
    PaginationInfo,
    SearchMetadata,
    SearchMode,
    SearchQuery,
    SortBy,
    SortOrder,
)
from docsearch.search.engine import RelevanceEngine
from docsearch.search.enhancer import ResultEnhancer
from docsearch.search.query_builder import build_engine_query
from docsearch.search.settings import SearchSettings
from docsearch.store.document_store import DocumentStore

logger = logging.getLogger(__name__)


class SearchService:
    """Entry point for document search."""

    def __init__(
        self,
        cache: ResultCache,
        engine: RelevanceEngine,
        enhancer: ResultEnhancer,
        documents: DocumentStore,
        settings: SearchSettings | None = None,
    ):
        """Initialize with the pipeline components."""
        self.cache = cache
        self.engine = engine
        self.enhancer = enhancer
        self.documents = documents
        self.settings = settings or SearchSettings()

    async def search(
        self,
        text: str,
        page: int = 1,
        limit: int | None = None,
        sort_by: str | SortBy = SortBy.RELEVANCE,
        sort_order: str | SortOrder = SortOrder.DESC,
        mode: str | SearchMode = SearchMode.NATURAL,
    ) -> PagedSearchResult:
        """Search documents and return one enhanced page.

        Raises:
            InvalidParameterError: sort_by, sort_order or mode is not recognized.
            EngineError: the relevance engine rejected or failed the query.
        """
        started = time.perf_counter()
        query = SearchQuery.from_params(
            text,
            page=page,
            limit=limit if limit is not None else self.settings.default_page_size,
            sort_by=sort_by,
            sort_order=sort_order,
            mode=mode,
        )
        key = cache_key_for(query)

        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %r (page %d)", query.text, query.page)
            return self._with_metadata(cached, query, started, cache_hit=True)

        logger.debug("Cache miss for %r (page %d)", query.text, query.page)
        result = await self._compute(query)
        await self.cache.set(key, query.text, result, ttl=self.settings.cache_ttl)
        return self._with_metadata(result, query, started, cache_hit=False)

    async def suggest(self, prefix: str, limit: int = 5) -> list[str]:
        """Document titles containing ``prefix``, for search-as-you-type."""
        prefix = prefix.strip()
        if not prefix:
            return []
        return await self.documents.suggest_titles(prefix, limit)

    async def warm_up(self, queries: Iterable[SearchQuery]) -> WarmupReport:
        """Make sure each query's page is cached, computing the missing ones."""
        by_key = {cache_key_for(q): q for q in queries}

        async def generate(key: str) -> PagedSearchResult:
            return await self._compute(by_key[key])

        report = await self.cache.warmup(
            ((key, q.text) for key, q in by_key.items()),
            generate,
            ttl=self.settings.cache_ttl,
        )
        logger.info(
            "Cache warmup: %d warmed, %d skipped, %d failed",
            report.warmed,
            report.skipped,
            report.failed,
        )
        return report

    async def clear_cache(self) -> int:
        """Drop every cached page."""
        return await self.cache.clear()

    async def cleanup_expired_cache(self) -> int:
        """Drop cached pages whose TTL has passed."""
        return await self.cache.cleanup_expired()

    async def invalidate(self, fragment: str) -> int:
        """Drop cached pages whose query text contains ``fragment``."""
        return await self.cache.invalidate_by_pattern(fragment)

    async def cache_stats(self) -> CacheStats:
        """Counts over the current cache contents."""
        return await self.cache.stats()

    async def popular_queries(self, limit: int = 10, days: int = 30) -> list[QueryCount]:
        """Most frequently cached query texts."""
        return await self.cache.popular_queries(limit, days)

    async def recent_queries(self, limit: int = 10) -> list[str]:
        """Most recently cached query texts."""
        return await self.cache.recent_queries(limit)

    async def _compute(self, query: SearchQuery) -> PagedSearchResult:
        engine_query = build_engine_query(query.text, query.mode)
        ranked = await self.engine.search_ranked(
            engine_query, query.page, query.limit, query.sort_by, query.sort_order
        )
        data = await self.enhancer.enhance(ranked.rows, query.text, query.mode)
        return PagedSearchResult(
            data=data,
            pagination=PaginationInfo.build(query.page, query.limit, ranked.total),
        )

    @staticmethod
    def _with_metadata(
        result: PagedSearchResult,
        query: SearchQuery,
        started: float,
        *,
        cache_hit: bool,
    ) -> PagedSearchResult:
        metadata = SearchMetadata(
            query=query.text,
            execution_time_ms=round((time.perf_counter() - started) * 1000, 2),
            page=query.page,
            limit=query.limit,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            search_mode=query.mode,
            cache_hit=cache_hit,
        )
        return result.model_copy(update={"metadata": metadata})
