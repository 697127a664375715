"""Document models."""

from datetime import datetime

from pydantic import BaseModel, Field


class Document(BaseModel):
    """An uploaded document and its extracted text."""

    id: int
    title: str
    filename: str
    content_text: str = ""
    file_size: int = Field(default=0, ge=0)
    mime_type: str
    blob_handle: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DocumentSummary(BaseModel):
    """Document metadata without its text, for listings and lookups."""

    id: int
    title: str
    filename: str
    file_size: int
    mime_type: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BulkDeleteFailure(BaseModel):
    """A document that could not be deleted, and why."""

    id: int
    reason: str


class BulkDeleteReport(BaseModel):
    """Per-id outcome of deleting several documents."""

    deleted: list[int] = Field(default_factory=list)
    failed: list[BulkDeleteFailure] = Field(default_factory=list)
