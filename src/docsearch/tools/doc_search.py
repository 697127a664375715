"""doc_search and doc_suggest MCP tools."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from docsearch.errors import EngineError, InvalidParameterError
from docsearch.models.search import MAX_LIMIT
from docsearch.search.service import SearchService

logger = logging.getLogger(__name__)


def register_doc_search(mcp: FastMCP) -> None:
    """Register the doc_search and doc_suggest tools with the MCP server."""

    @mcp.tool()
    async def doc_search(
        query: Annotated[str, Field(description="Search text")],
        page: Annotated[int, Field(description="1-based page number")] = 1,
        limit: Annotated[
            int | None,
            Field(description=f"Results per page (1-{MAX_LIMIT}); server default if omitted"),
        ] = None,
        sort_by: Annotated[
            str, Field(description="relevance, created_at, title or file_size")
        ] = "relevance",
        sort_order: Annotated[str, Field(description="ASC or DESC")] = "DESC",
        mode: Annotated[
            str,
            Field(
                description=(
                    "natural (any word), boolean (+required -excluded \"phrase\" prefix*) "
                    "or wildcard (every term as a required prefix)"
                ),
            ),
        ] = "natural",
        ctx: Context | None = None,
    ) -> str:
        """Full-text search over uploaded documents, ranked by relevance.

        Returns one page of results as JSON: each result has a snippet and
        title with matching terms wrapped in <mark> tags, plus pagination and
        query metadata. Repeated identical searches are served from cache.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        if not query.strip():
            return "Error: query cannot be empty."

        service: SearchService = ctx.lifespan_context["search_service"]
        try:
            result = await service.search(
                query,
                page=page,
                limit=limit,
                sort_by=sort_by,
                sort_order=sort_order,
                mode=mode,
            )
        except InvalidParameterError as e:
            return f"Error: {e}"
        except EngineError as e:
            logger.warning("Search failed for %r: %s", query, e)
            return f"Error: {e}"

        return result.model_dump_json(indent=2)

    @mcp.tool()
    async def doc_suggest(
        query: Annotated[str, Field(description="Partial title text")],
        limit: Annotated[int, Field(description="Maximum suggestions (1-20)", ge=1, le=20)] = 5,
        ctx: Context | None = None,
    ) -> str:
        """Suggest document titles containing the given text, for search-as-you-type."""
        if ctx is None:
            raise RuntimeError("Context not injected")

        service: SearchService = ctx.lifespan_context["search_service"]
        titles = await service.suggest(query, limit)
        if not titles:
            return "No suggestions."
        return "\n".join(titles)
