"""Async database protocols used by the store, engine and cache.

Only the SQLite implementation exists; code depends on these protocols so
that tests can hand in fakes and so the aiosqlite types stay in one module.
SQL throughout the package uses ``?`` placeholders and SQLite syntax.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Row(Protocol):
    """Result row addressable by column name or index."""

    def __getitem__(self, key: str | int) -> Any: ...

    def keys(self) -> Any: ...


@runtime_checkable
class Cursor(Protocol):
    """Outcome of one statement: affected-row info plus rows to fetch."""

    @property
    def rowcount(self) -> int: ...

    @property
    def lastrowid(self) -> int | None: ...

    async def fetchone(self) -> Row | None: ...

    async def fetchall(self) -> list[Row]: ...


@runtime_checkable
class Database(Protocol):
    """An open connection to the document database."""

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Run one statement."""
        ...

    async def executescript(self, sql: str) -> None:
        """Run a semicolon-separated script outside any open transaction."""
        ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def close(self) -> None: ...
