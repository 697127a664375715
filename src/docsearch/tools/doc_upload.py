"""doc_upload MCP tool: add a file from disk to the searchable collection."""

import logging
from pathlib import Path
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from docsearch.errors import ExtractionError
from docsearch.ingest.ingester import DocumentIngester
from docsearch.tools.formatters import format_document_header

logger = logging.getLogger(__name__)


def register_doc_upload(mcp: FastMCP) -> None:
    """Register the doc_upload tool with the MCP server."""

    @mcp.tool()
    async def doc_upload(
        path: Annotated[str, Field(description="Path to a .txt or .pdf file")],
        title: Annotated[
            str | None,
            Field(description="Document title (default: derived from the file name)"),
        ] = None,
        ctx: Context | None = None,
    ) -> str:
        """Upload a plain-text or PDF file so its text becomes searchable.

        The file is copied into server storage, its text is extracted and
        indexed. Files larger than the configured limit are rejected.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        file_path = Path(path).expanduser()
        if not file_path.is_file():
            return f"Error: File not found: {path}"

        ingester: DocumentIngester = ctx.lifespan_context["ingester"]
        try:
            document = await ingester.ingest_path(file_path, title)
        except (ValueError, ExtractionError) as e:
            return f"Error: {e}"

        return f"Uploaded:\n{format_document_header(document)}"
