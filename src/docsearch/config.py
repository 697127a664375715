"""Environment-variable-based configuration."""

import os
from pathlib import Path


def get_db_path() -> Path:
    """Return the database file path from DS_DB_PATH."""
    raw = os.environ.get("DS_DB_PATH", "~/.local/share/docsearch/documents.db")
    return Path(raw).expanduser()


def get_blob_dir() -> Path:
    """Return the directory for uploaded file bytes from DS_BLOB_DIR."""
    raw = os.environ.get("DS_BLOB_DIR", "~/.local/share/docsearch/uploads")
    return Path(raw).expanduser()


def get_cache_backend() -> str:
    """Return the result cache backend name from DS_CACHE_BACKEND (sqlite or memory)."""
    return os.environ.get("DS_CACHE_BACKEND", "sqlite").lower()


def get_cache_ttl() -> int:
    """Return the result cache TTL in seconds from DS_CACHE_TTL."""
    return int(os.environ.get("DS_CACHE_TTL", "3600"))


def get_cache_cleanup_interval() -> int:
    """Return the expired-entry sweep interval in seconds from DS_CACHE_CLEANUP_INTERVAL."""
    return int(os.environ.get("DS_CACHE_CLEANUP_INTERVAL", "86400"))


def get_snippet_length() -> int:
    """Return the snippet window length in characters from DS_SNIPPET_LENGTH."""
    return int(os.environ.get("DS_SNIPPET_LENGTH", "200"))


def get_snippet_step() -> int:
    """Return the snippet window step in characters from DS_SNIPPET_STEP."""
    return int(os.environ.get("DS_SNIPPET_STEP", "50"))


def get_max_file_size() -> int:
    """Return the upload size limit in bytes from DS_MAX_FILE_SIZE."""
    return int(os.environ.get("DS_MAX_FILE_SIZE", "10485760"))


def get_default_page_size() -> int:
    """Return the default results per page from DS_DEFAULT_PAGE_SIZE."""
    return int(os.environ.get("DS_DEFAULT_PAGE_SIZE", "10"))


def is_manager_mode() -> bool:
    """Return True if DS_MANAGER is set to TRUE."""
    return os.environ.get("DS_MANAGER", "").upper() == "TRUE"


def get_log_level() -> str:
    """Return the logging level from DS_LOG_LEVEL."""
    return os.environ.get("DS_LOG_LEVEL", "WARNING")
