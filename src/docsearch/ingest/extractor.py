"""Text extraction from uploaded plain-text and PDF files."""

import io
import logging
import re

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from docsearch.errors import ExtractionError

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"
APPLICATION_PDF = "application/pdf"

SUPPORTED_MIME_TYPES: dict[str, str] = {
    TEXT_PLAIN: ".txt",
    APPLICATION_PDF: ".pdf",
}

# Control characters other than tab and newline
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_INLINE_SPACE_RE = re.compile(r"[ \t]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def extract_text(data: bytes, mime_type: str) -> str:
    """Return cleaned searchable text for a file's bytes.

    Raises:
        ExtractionError: the type is unsupported or the file cannot be parsed.
    """
    match mime_type:
        case "text/plain":
            return clean_text(data.decode("utf-8", errors="replace"))
        case "application/pdf":
            return clean_text(_extract_pdf(data))
        case _:
            allowed = ", ".join(SUPPORTED_MIME_TYPES)
            raise ExtractionError(f"Unsupported file type: {mime_type}. Allowed: {allowed}")


def _extract_pdf(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, KeyError) as e:
        raise ExtractionError(f"Failed to extract text from PDF: {e}") from e
    logger.debug("Extracted %d PDF pages", len(pages))
    return "\n".join(pages)


def clean_text(text: str) -> str:
    """Normalize extracted text while keeping paragraph breaks."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_RE.sub("", text)
    text = _INLINE_SPACE_RE.sub(" ", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()
