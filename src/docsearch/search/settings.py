"""Search settings bundled for injection into the service."""

from pydantic import BaseModel, ConfigDict, Field

from docsearch.config import (
    get_cache_ttl,
    get_default_page_size,
    get_snippet_length,
    get_snippet_step,
)
from docsearch.models.search import MAX_LIMIT


class SearchSettings(BaseModel):
    """Tunables for the search pipeline."""

    model_config = ConfigDict(frozen=True)

    cache_ttl: int = Field(default=3600, ge=1)
    snippet_length: int = Field(default=200, ge=1)
    snippet_step: int = Field(default=50, ge=1)
    default_page_size: int = Field(default=10, ge=1, le=MAX_LIMIT)

    @classmethod
    def from_env(cls) -> "SearchSettings":
        """Read settings from DS_* environment variables."""
        return cls(
            cache_ttl=get_cache_ttl(),
            snippet_length=get_snippet_length(),
            snippet_step=get_snippet_step(),
            default_page_size=get_default_page_size(),
        )
