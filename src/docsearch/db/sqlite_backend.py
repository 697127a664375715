"""aiosqlite-backed implementation of the Database protocol."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

from docsearch.search.formatting import format_file_size

if TYPE_CHECKING:
    import aiosqlite

    from docsearch.db.backend import Cursor, Row

logger = logging.getLogger(__name__)


class SQLiteCursor:
    """Adapts aiosqlite.Cursor to the Cursor protocol."""

    def __init__(self, cursor: aiosqlite.Cursor) -> None:
        self._cursor = cursor

    @property
    def rowcount(self) -> int:
        """Rows changed by the statement, or -1 when SQLite cannot tell."""
        count = self._cursor.rowcount
        return -1 if count is None else count

    @property
    def lastrowid(self) -> int | None:
        return self._cursor.lastrowid

    async def fetchone(self) -> Row | None:
        return await self._cursor.fetchone()

    async def fetchall(self) -> list[Row]:
        return list(await self._cursor.fetchall())


class SQLiteBackend:
    """Document database on a single aiosqlite connection."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        """Wrap an open connection; see ``create_connection`` for setup."""
        self._conn = conn

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Run one statement."""
        return SQLiteCursor(await self._conn.execute(sql, params))

    async def executescript(self, sql: str) -> None:
        """Run a script; SQLite commits any pending transaction first."""
        await self._conn.executescript(sql)

    async def commit(self) -> None:
        await self._conn.commit()

    async def rollback(self) -> None:
        await self._conn.rollback()

    async def close(self) -> None:
        await self._conn.close()

    async def apply_schema(self) -> None:
        """Create document, full-text index and cache tables if missing."""
        from docsearch.db.schema import apply_cache_schema, apply_schema

        await apply_schema(self)
        await apply_cache_schema(self)

    async def vacuum(self) -> str:
        """Merge FTS index segments, then optimize and compact the file."""
        await self._conn.execute("INSERT INTO documents_fts(documents_fts) VALUES ('optimize')")
        await self._conn.commit()
        await self._conn.execute("PRAGMA optimize")
        await self._conn.executescript("VACUUM;")

        cursor = await self._conn.execute("PRAGMA database_list")
        main = await cursor.fetchone()
        path = main[2] if main else ""
        if not path:
            return "Vacuum complete."
        try:
            size = os.path.getsize(path)
        except OSError:
            logger.debug("Could not stat %s after vacuum", path)
            return "Vacuum complete."
        return f"Vacuum complete. Database size: {format_file_size(size)}"
