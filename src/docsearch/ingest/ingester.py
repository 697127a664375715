"""Upload path: store the file, extract its text, index it as a document."""

import asyncio
import logging
import mimetypes
import sqlite3
from pathlib import Path

from docsearch.errors import DocumentNotFoundError, ExtractionError
from docsearch.ingest.blob_store import LocalBlobStore
from docsearch.ingest.extractor import SUPPORTED_MIME_TYPES, extract_text
from docsearch.models.document import BulkDeleteFailure, BulkDeleteReport, Document
from docsearch.search.formatting import format_file_size
from docsearch.store.document_store import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


def title_from_filename(filename: str) -> str:
    """Readable title from a file name: ``my_report-2024.pdf`` -> ``My Report 2024``."""
    stem = Path(filename).stem.replace("_", " ").replace("-", " ")
    words = stem.lower().split()
    return " ".join(w[:1].upper() + w[1:] for w in words) or filename


def guess_mime_type(path: Path) -> str | None:
    """MIME type from the file extension, limited to supported types."""
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type if mime_type in SUPPORTED_MIME_TYPES else None


class DocumentIngester:
    """Turns uploaded files into searchable documents."""

    def __init__(
        self,
        store: DocumentStore,
        blobs: LocalBlobStore,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        """Initialize with the document store, blob storage and size limit."""
        self._store = store
        self._blobs = blobs
        self._max_file_size = max_file_size

    async def ingest(
        self,
        data: bytes,
        filename: str,
        mime_type: str,
        title: str | None = None,
    ) -> Document:
        """Store ``data`` and index its text.

        The blob is removed again if extraction or the insert fails, so a
        failed upload leaves nothing behind.

        Raises:
            ValueError: the file is empty or larger than the size limit.
            ExtractionError: the type is unsupported or the text is unreadable.
        """
        if not data:
            raise ValueError("File is empty")
        if len(data) > self._max_file_size:
            raise ValueError(
                "File size exceeds maximum allowed size "
                f"({format_file_size(self._max_file_size)})"
            )
        if mime_type not in SUPPORTED_MIME_TYPES:
            allowed = ", ".join(SUPPORTED_MIME_TYPES)
            raise ExtractionError(f"Unsupported file type: {mime_type}. Allowed: {allowed}")

        handle = self._blobs.save(data, filename)
        try:
            # PDF parsing is CPU-bound
            content = await asyncio.to_thread(extract_text, data, mime_type)
            document = await self._store.create_document(
                title=(title or "").strip() or title_from_filename(filename),
                filename=Path(filename).name,
                content_text=content,
                file_size=len(data),
                mime_type=mime_type,
                blob_handle=handle,
            )
        except Exception:
            self._blobs.delete(handle)
            raise

        logger.info(
            "Ingested %s as document %d (%d chars)", filename, document.id, len(content)
        )
        return document

    async def ingest_path(self, path: Path, title: str | None = None) -> Document:
        """Ingest a file from disk, guessing its MIME type from the extension."""
        mime_type = guess_mime_type(path)
        if mime_type is None:
            allowed = ", ".join(SUPPORTED_MIME_TYPES.values())
            raise ExtractionError(f"Unsupported file extension for {path.name}. Allowed: {allowed}")
        try:
            size = path.stat().st_size
        except OSError as e:
            raise ValueError(f"Cannot read {path}: {e}") from e
        if size > self._max_file_size:
            raise ValueError(
                "File size exceeds maximum allowed size "
                f"({format_file_size(self._max_file_size)})"
            )
        return await self.ingest(path.read_bytes(), path.name, mime_type, title)

    async def remove(self, document_id: int) -> Document:
        """Delete a document and its stored file.

        Raises:
            DocumentNotFoundError: no document has this id.
        """
        document = await self._store.find_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        await self._store.delete_document(document_id)
        if document.blob_handle:
            try:
                self._blobs.delete(document.blob_handle)
            except OSError:
                logger.warning(
                    "Could not delete blob %s for document %d",
                    document.blob_handle,
                    document_id,
                    exc_info=True,
                )
        return document

    async def remove_many(self, document_ids: list[int]) -> BulkDeleteReport:
        """Delete several documents, recording each id as deleted or failed.

        One failure does not stop the rest; a repeated id fails as not found.
        """
        report = BulkDeleteReport()
        for document_id in document_ids:
            try:
                await self.remove(document_id)
            except DocumentNotFoundError:
                report.failed.append(BulkDeleteFailure(id=document_id, reason="Document not found"))
            except sqlite3.Error as e:
                logger.warning("Could not delete document %d", document_id, exc_info=True)
                report.failed.append(BulkDeleteFailure(id=document_id, reason=str(e)))
            else:
                report.deleted.append(document_id)
        return report

    async def read_original(self, document_id: int) -> tuple[Document, bytes]:
        """Return a document together with the bytes of its uploaded file.

        Raises:
            DocumentNotFoundError: no document has this id, or its file is
                missing from blob storage.
        """
        document = await self._store.find_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        missing = f"File for document {document_id} not found on disk"
        if not document.blob_handle:
            raise DocumentNotFoundError(missing)
        try:
            data = self._blobs.read(document.blob_handle)
        except FileNotFoundError as e:
            raise DocumentNotFoundError(missing) from e
        logger.info("Read original file of document %d (%d bytes)", document_id, len(data))
        return document, data
