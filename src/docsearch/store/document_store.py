"""CRUD operations for documents."""

import logging
import sqlite3
from datetime import datetime
from typing import Any

from docsearch.db.backend import Database
from docsearch.db.queries import (
    delete_document,
    get_document,
    get_document_stats,
    get_document_text,
    insert_document,
    list_documents,
    suggest_titles,
    update_document_title,
)
from docsearch.errors import DocumentNotFoundError, StoreUnavailableError
from docsearch.models.document import Document, DocumentSummary
from docsearch.models.search import PaginationInfo, SortBy, SortOrder

logger = logging.getLogger(__name__)


class DocumentStore:
    """Document persistence: lookup by id, full text, listing and stats."""

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def create_document(
        self,
        title: str,
        filename: str,
        content_text: str,
        file_size: int,
        mime_type: str,
        blob_handle: str | None = None,
        created_at: datetime | None = None,
    ) -> Document:
        """Insert a document whose text has already been extracted."""
        document_id = await insert_document(
            self.db,
            title=title,
            filename=filename,
            content_text=content_text,
            file_size=file_size,
            mime_type=mime_type,
            blob_handle=blob_handle,
            created_at=created_at,
        )
        document = await get_document(self.db, document_id)
        if document is None:
            raise RuntimeError(f"Document {document_id} vanished after insert")
        logger.info("Created document %d: %s", document_id, title)
        return document

    async def find_by_id(self, document_id: int) -> Document | None:
        """Get a single document by id."""
        return await get_document(self.db, document_id)

    async def get_full_text(self, document_id: int) -> str | None:
        """Get the extracted text for a document, or None if it has none.

        Raises StoreUnavailableError when the database itself fails.
        """
        try:
            return await get_document_text(self.db, document_id)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Could not read text of document {document_id}") from e

    async def rename(self, document_id: int, title: str) -> Document:
        """Change a document's title."""
        title = title.strip()
        if not title:
            raise ValueError("Title cannot be empty")
        if not await update_document_title(self.db, document_id, title):
            raise DocumentNotFoundError(f"Document {document_id} not found")
        document = await get_document(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    async def delete_document(self, document_id: int) -> bool:
        """Delete a document row. Returns False if it did not exist."""
        deleted = await delete_document(self.db, document_id)
        if deleted:
            logger.info("Deleted document %d", document_id)
        return deleted

    async def list_documents(
        self,
        page: int = 1,
        limit: int = 10,
        sort_by: SortBy = SortBy.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> tuple[list[DocumentSummary], PaginationInfo]:
        """List document metadata one page at a time."""
        summaries, total = await list_documents(self.db, page, limit, sort_by, sort_order)
        return summaries, PaginationInfo.build(page, limit, total)

    async def suggest_titles(self, fragment: str, limit: int = 5) -> list[str]:
        """Titles containing ``fragment``, for search-as-you-type."""
        return await suggest_titles(self.db, fragment, limit)

    async def get_stats(self) -> dict[str, Any]:
        """Document counts, total size, by type and by month."""
        return await get_document_stats(self.db)
