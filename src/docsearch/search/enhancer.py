"""Turns ranked rows into display-ready results with snippets and highlights."""

import html
import logging
from typing import Protocol

from docsearch.errors import StoreUnavailableError
from docsearch.models.search import EnhancedResult, RawMatch, SearchMode
from docsearch.search.formatting import format_file_size, format_short_date
from docsearch.search.highlight import (
    DEFAULT_SNIPPET_LENGTH,
    DEFAULT_SNIPPET_STEP,
    MARK_CLOSE,
    MARK_OPEN,
    generate_snippet,
    highlight_text,
)

logger = logging.getLogger(__name__)

SCORE_DECIMALS = 4


class FullTextSource(Protocol):
    """Anything that can return a document's extracted text by id."""

    async def get_full_text(self, document_id: int) -> str | None:
        """Return the document text, or None if there is none."""
        ...


class ResultEnhancer:
    """Adds snippet, highlighted title and formatted fields to ranked rows."""

    def __init__(
        self,
        documents: FullTextSource,
        snippet_length: int = DEFAULT_SNIPPET_LENGTH,
        snippet_step: int = DEFAULT_SNIPPET_STEP,
        open_tag: str = MARK_OPEN,
        close_tag: str = MARK_CLOSE,
    ):
        """Initialize with a text source and snippet window settings."""
        if snippet_length < 1 or snippet_step < 1:
            raise ValueError("snippet_length and snippet_step must be positive")
        self.documents = documents
        self.snippet_length = snippet_length
        self.snippet_step = snippet_step
        self.open_tag = open_tag
        self.close_tag = close_tag

    async def enhance(
        self,
        rows: list[RawMatch],
        query_text: str,
        mode: SearchMode = SearchMode.NATURAL,
    ) -> list[EnhancedResult]:
        """Enhance every row. A row whose text cannot be fetched degrades, never fails."""
        return [await self.enhance_row(row, query_text, mode) for row in rows]

    async def enhance_row(
        self,
        row: RawMatch,
        query_text: str,
        mode: SearchMode = SearchMode.NATURAL,
    ) -> EnhancedResult:
        """Enhance a single ranked row."""
        content: str | None
        try:
            content = await self.documents.get_full_text(row.id)
        except StoreUnavailableError:
            logger.warning("Text unavailable for document %d", row.id, exc_info=True)
            content = None

        title = html.escape(row.title, quote=False)
        if content:
            snippet = generate_snippet(
                content,
                query_text,
                mode,
                length=self.snippet_length,
                step=self.snippet_step,
                open_tag=self.open_tag,
                close_tag=self.close_tag,
            )
            title_highlighted = highlight_text(
                title, query_text, mode, self.open_tag, self.close_tag
            )
        else:
            snippet = ""
            title_highlighted = title

        score = row.relevance_score
        return EnhancedResult(
            **row.model_dump(exclude={"relevance_score"}),
            relevance_score=round(score, SCORE_DECIMALS) if score is not None else None,
            snippet=snippet,
            title_highlighted=title_highlighted,
            file_size_formatted=format_file_size(row.file_size),
            created_at_formatted=format_short_date(row.created_at),
        )
