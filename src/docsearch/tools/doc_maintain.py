"""doc_maintain MCP tool: cache and database maintenance operations."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from docsearch.db.sqlite_backend import SQLiteBackend
from docsearch.errors import CacheBackendError
from docsearch.search.formatting import format_file_size
from docsearch.search.service import SearchService
from docsearch.store.document_store import DocumentStore
from docsearch.tools.formatters import format_cache_stats, format_query_counts

logger = logging.getLogger(__name__)

_ACTIONS = {
    "cache_stats",
    "cleanup_expired",
    "clear_cache",
    "invalidate",
    "popular_queries",
    "recent_queries",
    "document_stats",
    "vacuum",
}


def register_doc_maintain(mcp: FastMCP) -> None:
    """Register the doc_maintain tool with the MCP server."""

    @mcp.tool()
    async def doc_maintain(
        action: Annotated[
            str,
            Field(
                description=(
                    "Maintenance action: cache_stats, cleanup_expired, clear_cache, "
                    "invalidate, popular_queries, recent_queries, document_stats, vacuum"
                ),
            ),
        ],
        pattern: Annotated[
            str | None,
            Field(description="Required for invalidate: query text fragment to match"),
        ] = None,
        limit: Annotated[
            int,
            Field(description="For popular_queries and recent_queries: max rows", ge=1, le=100),
        ] = 10,
        days: Annotated[
            int,
            Field(description="For popular_queries: look-back window in days", ge=1),
        ] = 30,
        ctx: Context | None = None,
    ) -> str:
        """Administrative maintenance for the search cache and document database.

        Requires DS_MANAGER=TRUE environment variable.

        Actions:
        - cache_stats: Cached page counts (total, active, expired)
        - cleanup_expired: Delete cache entries whose TTL has passed
        - clear_cache: Delete every cache entry
        - invalidate: Delete cache entries whose query contains `pattern`
        - popular_queries: Queries with the most cached pages in the last `days`
        - recent_queries: Most recently cached queries
        - document_stats: Document counts and sizes by type and month
        - vacuum: Optimize the FTS index and database file
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        if action not in _ACTIONS:
            return f"Unknown action '{action}'. Use: {', '.join(sorted(_ACTIONS))}"

        lifespan = ctx.lifespan_context
        service: SearchService = lifespan["search_service"]
        store: DocumentStore = lifespan["document_store"]
        db = lifespan["db"]

        try:
            if action == "cache_stats":
                return format_cache_stats(await service.cache_stats())
            elif action == "cleanup_expired":
                removed = await service.cleanup_expired_cache()
                return f"Removed {removed} expired cache entries."
            elif action == "clear_cache":
                removed = await service.clear_cache()
                return f"Cleared {removed} cache entries."
            elif action == "invalidate":
                return await _action_invalidate(service, pattern)
            elif action == "popular_queries":
                return format_query_counts(await service.popular_queries(limit, days))
            elif action == "recent_queries":
                recent = await service.recent_queries(limit)
                return "\n".join(recent) if recent else "No cached queries."
        except CacheBackendError as e:
            logger.warning("Cache maintenance action %s failed", action, exc_info=True)
            return f"Error: Cache unavailable: {e}"

        if action == "document_stats":
            return await _action_document_stats(store)
        elif action == "vacuum":
            return await _action_vacuum(db)

        return "Action not implemented."


async def _action_invalidate(service: SearchService, pattern: str | None) -> str:
    """Delete cache entries matching a query fragment."""
    if not pattern:
        return "Error: pattern is required for invalidate action."
    removed = await service.invalidate(pattern)
    return f"Invalidated {removed} cache entries matching '{pattern}'."


async def _action_document_stats(store: DocumentStore) -> str:
    """Document overview with counts."""
    stats = await store.get_stats()

    lines = ["Document Statistics\n"]
    lines.append(
        f"Documents: {stats['total_documents']}"
        f" ({format_file_size(stats['total_size'])} total)"
    )

    by_type = stats.get("by_type", {})
    if by_type:
        lines.append("\nBy type:")
        for mime_type, count in by_type.items():
            lines.append(f"  {mime_type}: {count}")

    by_month = stats.get("by_month", {})
    if by_month:
        lines.append("\nUploads by month:")
        for month, count in by_month.items():
            lines.append(f"  {month}: {count}")

    return "\n".join(lines)


async def _action_vacuum(db: object) -> str:
    """Optimize the FTS index and compact the database file."""
    if not isinstance(db, SQLiteBackend):
        return "Error: vacuum is only supported for SQLite databases."
    return await db.vacuum()
