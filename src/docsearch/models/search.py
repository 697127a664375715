"""Search-related models."""

import math
from datetime import datetime
from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from docsearch.errors import InvalidParameterError

MAX_LIMIT = 100

E = TypeVar("E", bound=StrEnum)


class SearchMode(StrEnum):
    """How the query text is interpreted."""

    NATURAL = "natural"
    BOOLEAN = "boolean"
    WILDCARD = "wildcard"


class SortBy(StrEnum):
    """Result ordering field."""

    RELEVANCE = "relevance"
    CREATED_AT = "created_at"
    TITLE = "title"
    FILE_SIZE = "file_size"


class SortOrder(StrEnum):
    """Result ordering direction."""

    ASC = "ASC"
    DESC = "DESC"


class OperatorMode(StrEnum):
    """Which operator set the relevance engine applies to an engine query."""

    NATURAL_LANGUAGE = "natural_language"
    BOOLEAN = "boolean"


def _coerce(enum_cls: type[E], value: str | E, *, upper: bool = False) -> E:
    if isinstance(value, enum_cls):
        return value
    raw = str(value).strip()
    raw = raw.upper() if upper else raw.lower()
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidParameterError(
            f"Invalid {enum_cls.__name__} '{value}'. Use one of: {allowed}"
        ) from None


class SearchQuery(BaseModel):
    """Parameters for a document search."""

    model_config = ConfigDict(frozen=True)

    text: str
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=MAX_LIMIT)
    sort_by: SortBy = SortBy.RELEVANCE
    sort_order: SortOrder = SortOrder.DESC
    mode: SearchMode = SearchMode.NATURAL

    @classmethod
    def from_params(
        cls,
        text: str,
        page: int = 1,
        limit: int = 10,
        sort_by: str | SortBy = SortBy.RELEVANCE,
        sort_order: str | SortOrder = SortOrder.DESC,
        mode: str | SearchMode = SearchMode.NATURAL,
    ) -> "SearchQuery":
        """Build a query from loose caller input.

        Page and limit are clamped into range; unknown sort or mode names
        raise InvalidParameterError.
        """
        return cls(
            text=text,
            page=max(1, int(page)),
            limit=min(MAX_LIMIT, max(1, int(limit))),
            sort_by=_coerce(SortBy, sort_by),
            sort_order=_coerce(SortOrder, sort_order, upper=True),
            mode=_coerce(SearchMode, mode),
        )


class EngineQuery(BaseModel):
    """Mode-specific query text handed to the relevance engine."""

    model_config = ConfigDict(frozen=True)

    text: str
    operator_mode: OperatorMode


class RawMatch(BaseModel):
    """One ranked row from the relevance engine."""

    id: int
    title: str
    filename: str
    file_size: int
    mime_type: str
    created_at: datetime
    relevance_score: float | None = None


class RankedPage(BaseModel):
    """A page of ranked rows plus the total match count before pagination."""

    rows: list[RawMatch] = Field(default_factory=list)
    total: int = 0


class EnhancedResult(RawMatch):
    """A ranked row with snippet, highlighted title and display fields."""

    snippet: str = ""
    title_highlighted: str
    file_size_formatted: str
    created_at_formatted: str


class PaginationInfo(BaseModel):
    """Page arithmetic for a result set."""

    current_page: int
    per_page: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool
    next_page: int | None = None
    prev_page: int | None = None

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "PaginationInfo":
        """Compute page counts and neighbours for ``total`` rows."""
        total_pages = math.ceil(total / per_page) if per_page > 0 else 0
        has_next = page < total_pages
        has_prev = page > 1
        return cls(
            current_page=page,
            per_page=per_page,
            total=total,
            total_pages=total_pages,
            has_next=has_next,
            has_prev=has_prev,
            next_page=page + 1 if has_next else None,
            prev_page=page - 1 if has_prev else None,
        )


class SearchMetadata(BaseModel):
    """Per-call information attached to every search response."""

    query: str
    execution_time_ms: float
    page: int
    limit: int
    sort_by: SortBy
    sort_order: SortOrder
    search_mode: SearchMode
    cache_hit: bool = False


class PagedSearchResult(BaseModel):
    """A page of enhanced results. Cached copies carry no metadata."""

    data: list[EnhancedResult] = Field(default_factory=list)
    pagination: PaginationInfo
    metadata: SearchMetadata | None = None
