"""Tests for cache key generation."""

from docsearch.cache.keys import KEY_PREFIX, cache_key_for, generate_cache_key
from docsearch.models.search import SearchQuery

BASE = {
    "query": "invoice",
    "page": 1,
    "limit": 10,
    "sort_by": "relevance",
    "sort_order": "DESC",
    "mode": "natural",
}


def test_same_parameters_same_key():
    assert generate_cache_key(**BASE) == generate_cache_key(**BASE)


def test_key_format():
    key = generate_cache_key(**BASE)
    assert key.startswith(KEY_PREFIX)
    digest = key.removeprefix(KEY_PREFIX)
    assert len(digest) == 32
    assert all(c in "0123456789abcdef" for c in digest)


def test_every_field_changes_the_key():
    base_key = generate_cache_key(**BASE)
    changes = {
        "query": "invoices",
        "page": 2,
        "limit": 20,
        "sort_by": "title",
        "sort_order": "ASC",
        "mode": "boolean",
    }
    for field, value in changes.items():
        assert generate_cache_key(**{**BASE, field: value}) != base_key, field


def test_query_text_is_case_sensitive():
    assert generate_cache_key(**BASE) != generate_cache_key(**{**BASE, "query": "Invoice"})


def test_key_for_search_query_matches_raw_tuple():
    query = SearchQuery.from_params("invoice", sort_order="desc")
    assert cache_key_for(query) == generate_cache_key(**BASE)


def test_unicode_query():
    key = generate_cache_key(**{**BASE, "query": "café résumé"})
    assert key.startswith(KEY_PREFIX)
    assert key != generate_cache_key(**{**BASE, "query": "cafe resume"})
