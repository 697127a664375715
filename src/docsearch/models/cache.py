"""Result cache models."""

from pydantic import BaseModel, Field

from docsearch.models.search import PagedSearchResult


class CacheEntry(BaseModel):
    """A cached result page. Timestamps are epoch seconds from the cache clock."""

    key: str
    query_text: str
    results: PagedSearchResult
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Return True once ``now`` has reached the expiry time."""
        return now >= self.expires_at


class CacheStats(BaseModel):
    """Counts over the current cache contents."""

    total_entries: int = 0
    active_entries: int = 0
    expired_entries: int = 0
    oldest_entry: float | None = None
    newest_entry: float | None = None


class QueryCount(BaseModel):
    """How many cached pages exist for a query text."""

    query_text: str
    search_count: int


class WarmupReport(BaseModel):
    """Outcome of pre-populating the cache."""

    warmed: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)
