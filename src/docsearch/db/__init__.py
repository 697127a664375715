"""Database connection and schema management."""

from docsearch.db.backend import Cursor, Database, Row
from docsearch.db.sqlite_backend import SQLiteBackend

__all__ = ["Cursor", "Database", "Row", "SQLiteBackend"]
