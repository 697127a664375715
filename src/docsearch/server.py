"""FastMCP server with lifespan management and tool registration."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from docsearch.cache.backend import CacheBackend
from docsearch.cache.memory import MemoryCacheBackend
from docsearch.cache.result_cache import ResultCache
from docsearch.cache.sqlite import SQLiteCacheBackend
from docsearch.cache.sweeper import start_sweeper, stop_sweeper
from docsearch.config import (
    get_blob_dir,
    get_cache_backend,
    get_cache_cleanup_interval,
    get_db_path,
    get_log_level,
    get_max_file_size,
    is_manager_mode,
)
from docsearch.db.backend import Database
from docsearch.db.connection import create_connection
from docsearch.ingest.blob_store import LocalBlobStore
from docsearch.ingest.ingester import DocumentIngester
from docsearch.search.engine import RelevanceEngine
from docsearch.search.enhancer import ResultEnhancer
from docsearch.search.service import SearchService
from docsearch.search.settings import SearchSettings
from docsearch.store.document_store import DocumentStore
from docsearch.tools.doc_get import register_doc_get
from docsearch.tools.doc_maintain import register_doc_maintain
from docsearch.tools.doc_search import register_doc_search
from docsearch.tools.doc_upload import register_doc_upload


def _create_cache_backend(name: str, db: Database) -> CacheBackend:
    """Create the cache storage for the given backend name."""
    if name == "memory":
        return MemoryCacheBackend()
    if name == "sqlite":
        return SQLiteCacheBackend(db)
    raise ValueError(f"Unknown cache backend '{name}'. Use: memory, sqlite")


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Manage database connection, cache and sweeper lifecycle."""
    # Configure logging to stderr (stdout is MCP stdio transport)
    logging.basicConfig(
        level=getattr(logging, get_log_level().upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    db_path = get_db_path()
    logger.info("Opening database at %s", db_path)
    db = await create_connection(db_path)

    settings = SearchSettings.from_env()
    document_store = DocumentStore(db)

    backend_name = get_cache_backend()
    cache = ResultCache(_create_cache_backend(backend_name, db), default_ttl=settings.cache_ttl)
    logger.info("Result cache: %s backend, TTL %ds", backend_name, settings.cache_ttl)

    search_service = SearchService(
        cache=cache,
        engine=RelevanceEngine(db),
        enhancer=ResultEnhancer(
            document_store,
            snippet_length=settings.snippet_length,
            snippet_step=settings.snippet_step,
        ),
        documents=document_store,
        settings=settings,
    )
    ingester = DocumentIngester(
        document_store,
        LocalBlobStore(get_blob_dir()),
        max_file_size=get_max_file_size(),
    )

    sweeper = start_sweeper(cache, get_cache_cleanup_interval())

    try:
        yield {
            "db": db,
            "document_store": document_store,
            "cache": cache,
            "search_service": search_service,
            "ingester": ingester,
        }
    finally:
        await stop_sweeper(sweeper)
        await db.close()
        logger.info("Database connection closed")


_INSTRUCTIONS = """\
Full-text search over a collection of uploaded plain-text and PDF documents.

SEARCHING:
- doc_search: Ranked search. Modes: natural (any word matches), boolean \
(+required -excluded "exact phrase" prefix*), wildcard (every term becomes a \
required prefix). Results are paged; use page/limit to move through them. \
Snippets and titles mark matched terms with <mark> tags.
- doc_suggest: Title suggestions for partial input.

DOCUMENTS:
- doc_get: Full extracted text of one document (use after doc_search).
- doc_list: Browse all documents by date, title or size.
- doc_upload: Add a .txt or .pdf file from disk.
- doc_download: Save a copy of the original uploaded file.
- doc_rename: Change a document's title.
- doc_delete: Remove a document permanently.
- doc_delete_many: Remove several documents, reporting each outcome.

Identical searches within the cache TTL are served from cache; newly uploaded \
or deleted documents appear in those results once the cached page expires.
"""


def create_server() -> FastMCP:
    """Create and configure the MCP server with all tools."""
    mcp = FastMCP(
        "docsearch",
        instructions=_INSTRUCTIONS,
        lifespan=lifespan,
    )

    register_doc_search(mcp)
    register_doc_get(mcp)
    register_doc_upload(mcp)

    if is_manager_mode():
        register_doc_maintain(mcp)

    return mcp
