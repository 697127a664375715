"""Document retrieval and management MCP tools.

doc_get, doc_list, doc_download, doc_rename, doc_delete and doc_delete_many.
"""

import logging
from pathlib import Path
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from docsearch.errors import DocumentNotFoundError
from docsearch.ingest.ingester import DocumentIngester
from docsearch.models.search import MAX_LIMIT, SortBy, SortOrder
from docsearch.search.formatting import format_file_size
from docsearch.store.document_store import DocumentStore
from docsearch.tools.formatters import (
    format_bulk_delete,
    format_document_full,
    format_document_list,
)

logger = logging.getLogger(__name__)

_LIST_SORTS = {SortBy.CREATED_AT, SortBy.TITLE, SortBy.FILE_SIZE}


async def _save_original(ingester: DocumentIngester, document_id: int, destination: Path) -> str:
    """Write a document's uploaded file to ``destination`` (a file or directory)."""
    try:
        document, data = await ingester.read_original(document_id)
    except DocumentNotFoundError as e:
        return f"Error: {e}."

    target = destination / Path(document.filename).name if destination.is_dir() else destination
    if target.exists():
        return f"Error: {target} already exists."
    if not target.parent.is_dir():
        return f"Error: Directory not found: {target.parent}"
    try:
        target.write_bytes(data)
    except OSError as e:
        return f"Error: Could not write {target}: {e}"
    return f"Saved [#{document.id}] {document.title} to {target} ({format_file_size(len(data))})"


def register_doc_get(mcp: FastMCP) -> None:
    """Register the document retrieval and management tools."""

    @mcp.tool()
    async def doc_get(
        document_id: Annotated[int, Field(description="Document id")],
        ctx: Context | None = None,
    ) -> str:
        """Retrieve a document's metadata and full extracted text by id.

        Use after doc_search to read a result in full.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        store: DocumentStore = ctx.lifespan_context["document_store"]
        document = await store.find_by_id(document_id)
        if document is None:
            return f"Error: Document {document_id} not found."
        return format_document_full(document)

    @mcp.tool()
    async def doc_download(
        document_id: Annotated[int, Field(description="Document id")],
        destination: Annotated[
            str, Field(description="Directory to save into, or a new file path")
        ],
        ctx: Context | None = None,
    ) -> str:
        """Save a copy of the originally uploaded file to disk.

        Existing files are never overwritten.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        ingester: DocumentIngester = ctx.lifespan_context["ingester"]
        return await _save_original(ingester, document_id, Path(destination).expanduser())

    @mcp.tool()
    async def doc_list(
        page: Annotated[int, Field(description="1-based page number", ge=1)] = 1,
        limit: Annotated[
            int, Field(description=f"Documents per page (1-{MAX_LIMIT})", ge=1, le=MAX_LIMIT)
        ] = 10,
        sort_by: Annotated[str, Field(description="created_at, title or file_size")] = (
            "created_at"
        ),
        sort_order: Annotated[str, Field(description="ASC or DESC")] = "DESC",
        ctx: Context | None = None,
    ) -> str:
        """List uploaded documents one page at a time."""
        if ctx is None:
            raise RuntimeError("Context not injected")

        try:
            sort = SortBy(sort_by.strip().lower())
            order = SortOrder(sort_order.strip().upper())
        except ValueError:
            return (
                "Error: sort_by must be one of "
                f"{', '.join(sorted(_LIST_SORTS))} and sort_order ASC or DESC."
            )
        if sort not in _LIST_SORTS:
            return f"Error: sort_by must be one of {', '.join(sorted(_LIST_SORTS))}."

        store: DocumentStore = ctx.lifespan_context["document_store"]
        summaries, pagination = await store.list_documents(page, limit, sort, order)
        return format_document_list(summaries, pagination)

    @mcp.tool()
    async def doc_delete(
        document_id: Annotated[int, Field(description="Document id")],
        ctx: Context | None = None,
    ) -> str:
        """Permanently delete a document and its stored file.

        Cached search pages that include it expire with their TTL.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        ingester: DocumentIngester = ctx.lifespan_context["ingester"]
        try:
            document = await ingester.remove(document_id)
        except DocumentNotFoundError as e:
            return f"Error: {e}."
        return f"Deleted [#{document.id}] {document.title}"

    @mcp.tool()
    async def doc_rename(
        document_id: Annotated[int, Field(description="Document id")],
        title: Annotated[str, Field(description="New title")],
        ctx: Context | None = None,
    ) -> str:
        """Change a document's title.

        Cached search pages keep the old title until their TTL expires.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        store: DocumentStore = ctx.lifespan_context["document_store"]
        try:
            document = await store.rename(document_id, title)
        except (ValueError, DocumentNotFoundError) as e:
            return f"Error: {e}."
        return f"Renamed [#{document.id}] {document.title}"

    @mcp.tool()
    async def doc_delete_many(
        document_ids: Annotated[list[int], Field(description="Document ids to delete")],
        ctx: Context | None = None,
    ) -> str:
        """Permanently delete several documents, reporting each id's outcome."""
        if ctx is None:
            raise RuntimeError("Context not injected")
        if not document_ids:
            return "Error: document_ids is empty."

        ingester: DocumentIngester = ctx.lifespan_context["ingester"]
        report = await ingester.remove_many(document_ids)
        return format_bulk_delete(report)
