"""Query helpers for common document operations."""

import sqlite3
from datetime import UTC, datetime, timedelta
from typing import Any

from docsearch.db.backend import Cursor, Database, Row
from docsearch.models.document import Document, DocumentSummary
from docsearch.models.search import SortBy, SortOrder

# Listing has no relevance score, so relevance falls back to recency
_LIST_SORT_COLUMNS: dict[SortBy, str] = {
    SortBy.RELEVANCE: "created_at",
    SortBy.CREATED_AT: "created_at",
    SortBy.TITLE: "title COLLATE NOCASE",
    SortBy.FILE_SIZE: "file_size",
}

_SUMMARY_COLUMNS = "id, title, filename, file_size, mime_type, created_at, updated_at"


async def _write(db: Database, sql: str, params: tuple[Any, ...]) -> Cursor:
    """Run one modifying statement and commit; roll back if it fails."""
    try:
        cursor = await db.execute(sql, params)
        await db.commit()
    except sqlite3.Error:
        await db.rollback()
        raise
    return cursor


def row_to_document(row: Row) -> Document:
    """Convert a full database row to a Document."""
    return Document(
        id=row["id"],
        title=row["title"],
        filename=row["filename"],
        content_text=row["content_text"],
        file_size=row["file_size"],
        mime_type=row["mime_type"],
        blob_handle=row["blob_handle"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def row_to_summary(row: Row) -> DocumentSummary:
    """Convert a metadata-only row to a DocumentSummary."""
    return DocumentSummary(
        id=row["id"],
        title=row["title"],
        filename=row["filename"],
        file_size=row["file_size"],
        mime_type=row["mime_type"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


async def insert_document(
    db: Database,
    *,
    title: str,
    filename: str,
    content_text: str,
    file_size: int,
    mime_type: str,
    blob_handle: str | None = None,
    created_at: datetime | None = None,
) -> int:
    """Insert a new document and return its id. FTS is auto-synced via triggers."""
    stamp = (created_at or datetime.now(UTC)).isoformat()
    cursor = await _write(
        db,
        """INSERT INTO documents
        (title, filename, content_text, file_size, mime_type, blob_handle, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (title, filename, content_text, file_size, mime_type, blob_handle, stamp, stamp),
    )
    if cursor.lastrowid is None:
        raise RuntimeError("INSERT into documents returned no row id")
    return cursor.lastrowid


async def get_document(db: Database, document_id: int) -> Document | None:
    """Get a single document by id."""
    cursor = await db.execute("SELECT * FROM documents WHERE id = ?", (document_id,))
    row = await cursor.fetchone()
    return row_to_document(row) if row else None


async def get_document_text(db: Database, document_id: int) -> str | None:
    """Get only the extracted text of a document. Empty text is returned as None."""
    cursor = await db.execute("SELECT content_text FROM documents WHERE id = ?", (document_id,))
    row = await cursor.fetchone()
    if row is None:
        return None
    return row["content_text"] or None


async def update_document_title(db: Database, document_id: int, title: str) -> bool:
    """Rename a document. Returns False if no row matched."""
    cursor = await _write(
        db,
        "UPDATE documents SET title = ?, updated_at = ? WHERE id = ?",
        (title, _now_iso(), document_id),
    )
    return cursor.rowcount > 0


async def delete_document(db: Database, document_id: int) -> bool:
    """Hard-delete a document. Returns False if no row matched."""
    cursor = await _write(db, "DELETE FROM documents WHERE id = ?", (document_id,))
    return cursor.rowcount > 0


async def list_documents(
    db: Database,
    page: int,
    limit: int,
    sort_by: SortBy = SortBy.CREATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
) -> tuple[list[DocumentSummary], int]:
    """Return one page of document metadata and the total document count."""
    cursor = await db.execute("SELECT COUNT(*) FROM documents")
    row = await cursor.fetchone()
    total = row[0] if row else 0

    column = _LIST_SORT_COLUMNS[sort_by]
    cursor = await db.execute(
        f"SELECT {_SUMMARY_COLUMNS} FROM documents"  # noqa: S608
        f" ORDER BY {column} {sort_order.value}, id ASC LIMIT ? OFFSET ?",
        (limit, (page - 1) * limit),
    )
    rows = await cursor.fetchall()
    return [row_to_summary(r) for r in rows], total


async def suggest_titles(db: Database, fragment: str, limit: int = 5) -> list[str]:
    """Return distinct titles containing ``fragment``, alphabetically."""
    cursor = await db.execute(
        "SELECT DISTINCT title FROM documents WHERE title LIKE ? ESCAPE '\\'"
        " ORDER BY title COLLATE NOCASE LIMIT ?",
        (f"%{_escape_like(fragment)}%", limit),
    )
    return [row["title"] for row in await cursor.fetchall()]


async def get_document_stats(db: Database) -> dict[str, Any]:
    """Return document statistics: counts, total size, by type and by month."""
    stats: dict[str, Any] = {}

    cursor = await db.execute(
        "SELECT COUNT(*) as total, COALESCE(SUM(file_size), 0) as size FROM documents"
    )
    row = await cursor.fetchone()
    if row is None:
        raise RuntimeError("COUNT query returned no rows")
    stats["total_documents"] = row["total"]
    stats["total_size"] = row["size"]

    cursor = await db.execute(
        "SELECT mime_type, COUNT(*) as cnt FROM documents GROUP BY mime_type ORDER BY mime_type"
    )
    stats["by_type"] = {r["mime_type"]: r["cnt"] for r in await cursor.fetchall()}

    # Last 12 months, newest first
    since = (datetime.now(UTC) - timedelta(days=365)).isoformat()
    cursor = await db.execute(
        "SELECT substr(created_at, 1, 7) as month, COUNT(*) as cnt FROM documents"
        " WHERE created_at >= ? GROUP BY month ORDER BY month DESC",
        (since,),
    )
    stats["by_month"] = {r["month"]: r["cnt"] for r in await cursor.fetchall()}

    return stats


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()
