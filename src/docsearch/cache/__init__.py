"""Search result caching."""

from docsearch.cache.backend import CacheBackend
from docsearch.cache.keys import cache_key_for, generate_cache_key
from docsearch.cache.memory import MemoryCacheBackend
from docsearch.cache.result_cache import ResultCache
from docsearch.cache.sqlite import SQLiteCacheBackend

__all__ = [
    "CacheBackend",
    "MemoryCacheBackend",
    "ResultCache",
    "SQLiteCacheBackend",
    "cache_key_for",
    "generate_cache_key",
]
