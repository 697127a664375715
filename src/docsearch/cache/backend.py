"""Cache storage protocol.

A backend only stores and scans entries; TTL decisions live in ResultCache.
Backends raise CacheBackendError when the storage medium fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from docsearch.models.cache import CacheEntry


@runtime_checkable
class CacheBackend(Protocol):
    """Key/value storage for cache entries with expiry metadata."""

    async def load(self, key: str) -> CacheEntry | None:
        """Return the stored entry for ``key`` regardless of expiry."""
        ...

    async def store(self, entry: CacheEntry) -> None:
        """Insert or wholly replace the entry with the same key."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        ...

    async def entries(self) -> list[CacheEntry]:
        """Return every stored entry, expired or not."""
        ...

    async def delete_expired(self, now: float) -> int:
        """Remove entries whose ``expires_at <= now``. Returns the count removed."""
        ...

    async def delete_matching(self, fragment: str) -> int:
        """Remove entries whose query text contains ``fragment``."""
        ...

    async def clear(self) -> int:
        """Remove everything. Returns the count removed."""
        ...
