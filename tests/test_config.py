"""Tests for environment-based configuration."""

from pathlib import Path
from unittest.mock import patch

from docsearch.config import (
    get_blob_dir,
    get_cache_backend,
    get_cache_cleanup_interval,
    get_cache_ttl,
    get_db_path,
    get_default_page_size,
    get_log_level,
    get_max_file_size,
    get_snippet_length,
    get_snippet_step,
)
from docsearch.search.settings import SearchSettings


def test_defaults():
    with patch.dict("os.environ", {}, clear=True):
        assert get_db_path() == Path("~/.local/share/docsearch/documents.db").expanduser()
        assert get_blob_dir() == Path("~/.local/share/docsearch/uploads").expanduser()
        assert get_cache_backend() == "sqlite"
        assert get_cache_ttl() == 3600
        assert get_cache_cleanup_interval() == 86400
        assert get_snippet_length() == 200
        assert get_snippet_step() == 50
        assert get_max_file_size() == 10 * 1024 * 1024
        assert get_default_page_size() == 10
        assert get_log_level() == "WARNING"


def test_from_env():
    with patch.dict(
        "os.environ",
        {
            "DS_DB_PATH": "/tmp/x.db",
            "DS_CACHE_BACKEND": "Memory",
            "DS_CACHE_TTL": "60",
            "DS_SNIPPET_LENGTH": "120",
        },
    ):
        assert get_db_path() == Path("/tmp/x.db")
        assert get_cache_backend() == "memory"
        assert get_cache_ttl() == 60
        assert get_snippet_length() == 120


def test_search_settings_from_env():
    with patch.dict(
        "os.environ",
        {"DS_CACHE_TTL": "90", "DS_SNIPPET_STEP": "25", "DS_DEFAULT_PAGE_SIZE": "20"},
    ):
        settings = SearchSettings.from_env()
    assert settings.cache_ttl == 90
    assert settings.snippet_step == 25
    assert settings.default_page_size == 20
    assert settings.snippet_length == 200
