"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest_asyncio

from docsearch.cache.memory import MemoryCacheBackend
from docsearch.cache.result_cache import ResultCache
from docsearch.db.connection import create_connection
from docsearch.models.document import Document
from docsearch.search.engine import RelevanceEngine
from docsearch.search.enhancer import ResultEnhancer
from docsearch.search.service import SearchService
from docsearch.search.settings import SearchSettings
from docsearch.store.document_store import DocumentStore

BASE_TIME = datetime(2024, 1, 5, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def db():
    """In-memory database with full schema."""
    conn = await create_connection(":memory:")
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store(db):
    """Document store backed by in-memory DB."""
    return DocumentStore(db)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest_asyncio.fixture
async def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def cache(clock):
    """In-memory result cache on a fake clock."""
    return ResultCache(MemoryCacheBackend(), default_ttl=3600, clock=clock)


@pytest_asyncio.fixture
async def service(db, store, cache):
    """Search service wired to the in-memory DB and cache."""
    return SearchService(
        cache=cache,
        engine=RelevanceEngine(db),
        enhancer=ResultEnhancer(store),
        documents=store,
        settings=SearchSettings(cache_ttl=3600),
    )


async def add_document(
    store: DocumentStore,
    title: str,
    content: str,
    *,
    filename: str | None = None,
    file_size: int | None = None,
    mime_type: str = "text/plain",
    days_ago: int = 0,
) -> Document:
    """Insert a document with sensible defaults."""
    return await store.create_document(
        title=title,
        filename=filename or f"{title.lower().replace(' ', '_')}.txt",
        content_text=content,
        file_size=file_size if file_size is not None else len(content.encode()),
        mime_type=mime_type,
        created_at=BASE_TIME - timedelta(days=days_ago),
    )
