"""In-process cache backend."""

from dataclasses import dataclass

from docsearch.models.cache import CacheEntry


@dataclass(frozen=True)
class _Slot:
    query_text: str
    expires_at: float
    payload: str


class MemoryCacheBackend:
    """Dict-backed cache storage; contents are lost when the process exits.

    Entries are held as serialized JSON so callers never share mutable
    result objects with the cache.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._slots: dict[str, _Slot] = {}

    async def load(self, key: str) -> CacheEntry | None:
        """Return the stored entry for ``key`` regardless of expiry."""
        slot = self._slots.get(key)
        if slot is None:
            return None
        return CacheEntry.model_validate_json(slot.payload)

    async def store(self, entry: CacheEntry) -> None:
        """Insert or wholly replace the entry with the same key."""
        self._slots[entry.key] = _Slot(
            query_text=entry.query_text,
            expires_at=entry.expires_at,
            payload=entry.model_dump_json(),
        )

    async def delete(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        return self._slots.pop(key, None) is not None

    async def entries(self) -> list[CacheEntry]:
        """Return every stored entry, expired or not."""
        return [CacheEntry.model_validate_json(s.payload) for s in list(self._slots.values())]

    async def delete_expired(self, now: float) -> int:
        """Remove entries whose ``expires_at <= now``."""
        expired = [key for key, slot in self._slots.items() if slot.expires_at <= now]
        for key in expired:
            del self._slots[key]
        return len(expired)

    async def delete_matching(self, fragment: str) -> int:
        """Remove entries whose query text contains ``fragment``."""
        matched = [key for key, slot in self._slots.items() if fragment in slot.query_text]
        for key in matched:
            del self._slots[key]
        return len(matched)

    async def clear(self) -> int:
        """Remove everything."""
        count = len(self._slots)
        self._slots.clear()
        return count
