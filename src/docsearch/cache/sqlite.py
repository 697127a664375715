"""SQLite cache backend storing entries in the search_cache table."""

import logging
import sqlite3

from pydantic import ValidationError

from docsearch.db.backend import Database, Row
from docsearch.errors import CacheBackendError
from docsearch.models.cache import CacheEntry
from docsearch.models.search import PagedSearchResult

logger = logging.getLogger(__name__)


def _row_to_entry(row: Row) -> CacheEntry:
    return CacheEntry(
        key=row["cache_key"],
        query_text=row["query_text"],
        results=PagedSearchResult.model_validate_json(row["results"]),
        created_at=row["created_at"],
        expires_at=row["expires_at"],
    )


class SQLiteCacheBackend:
    """Cache storage in the same database as the documents."""

    def __init__(self, db: Database):
        """Initialize with a database whose schema includes search_cache."""
        self.db = db

    async def load(self, key: str) -> CacheEntry | None:
        """Return the stored entry for ``key`` regardless of expiry."""
        try:
            cursor = await self.db.execute(
                "SELECT * FROM search_cache WHERE cache_key = ?", (key,)
            )
            row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise CacheBackendError(f"Cache read failed for {key}") from e
        return _row_to_entry(row) if row else None

    async def store(self, entry: CacheEntry) -> None:
        """Insert or wholly replace the entry with the same key."""
        try:
            await self.db.execute(
                """INSERT OR REPLACE INTO search_cache
                (cache_key, query_text, results, created_at, expires_at)
                VALUES (?, ?, ?, ?, ?)""",
                (
                    entry.key,
                    entry.query_text,
                    entry.results.model_dump_json(),
                    entry.created_at,
                    entry.expires_at,
                ),
            )
            await self.db.commit()
        except sqlite3.Error as e:
            raise CacheBackendError(f"Cache write failed for {entry.key}") from e

    async def delete(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        return await self._delete("DELETE FROM search_cache WHERE cache_key = ?", (key,)) > 0

    async def entries(self) -> list[CacheEntry]:
        """Return every stored entry, expired or not."""
        try:
            cursor = await self.db.execute("SELECT * FROM search_cache ORDER BY created_at")
            rows = await cursor.fetchall()
        except sqlite3.Error as e:
            raise CacheBackendError("Cache scan failed") from e

        entries: list[CacheEntry] = []
        for row in rows:
            try:
                entries.append(_row_to_entry(row))
            except ValidationError:
                logger.warning("Skipping undecodable cache row %s", row["cache_key"])
        return entries

    async def delete_expired(self, now: float) -> int:
        """Remove entries whose ``expires_at <= now`` in a single statement."""
        return await self._delete("DELETE FROM search_cache WHERE expires_at <= ?", (now,))

    async def delete_matching(self, fragment: str) -> int:
        """Remove entries whose query text contains ``fragment`` (case-sensitive)."""
        return await self._delete(
            "DELETE FROM search_cache WHERE instr(query_text, ?) > 0", (fragment,)
        )

    async def clear(self) -> int:
        """Remove everything."""
        return await self._delete("DELETE FROM search_cache")

    async def _delete(self, sql: str, params: tuple[object, ...] = ()) -> int:
        try:
            cursor = await self.db.execute(sql, params)
            await self.db.commit()
        except sqlite3.Error as e:
            raise CacheBackendError("Cache delete failed") from e
        return max(cursor.rowcount, 0)
