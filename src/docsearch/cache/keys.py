"""Deterministic cache keys for search parameters."""

import hashlib
import json

from docsearch.models.search import SearchQuery

KEY_PREFIX = "search_"


def generate_cache_key(
    query: str,
    page: int,
    limit: int,
    sort_by: str,
    sort_order: str,
    mode: str,
) -> str:
    """Hash the full parameter tuple into a cache key.

    Format: search_{first 32 hex chars of sha256(canonical JSON)}.
    Keys are serialized with sorted keys, so the same tuple always hashes
    the same way and a change to any one field changes the key.
    """
    canonical = json.dumps(
        {
            "query": query,
            "page": int(page),
            "limit": int(limit),
            "sort_by": str(sort_by),
            "sort_order": str(sort_order),
            "mode": str(mode),
        },
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]
    return f"{KEY_PREFIX}{digest}"


def cache_key_for(query: SearchQuery) -> str:
    """Cache key for a validated SearchQuery."""
    return generate_cache_key(
        query.text,
        query.page,
        query.limit,
        query.sort_by.value,
        query.sort_order.value,
        query.mode.value,
    )
