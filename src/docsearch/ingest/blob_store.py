"""Local filesystem storage for uploaded file bytes."""

import logging
import re
import uuid
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9_-]")
_MAX_BASENAME = 50


def make_blob_handle(original_name: str, now: datetime | None = None) -> str:
    """Build a unique, filesystem-safe name: ``YYYY-MM-DD_<hex>_<basename>.<ext>``."""
    name = Path(original_name).name
    path = Path(name)
    basename = _UNSAFE_CHARS_RE.sub("_", path.stem)[:_MAX_BASENAME] or "file"
    extension = path.suffix.lstrip(".").lower()
    day = (now or datetime.now(UTC)).strftime("%Y-%m-%d")
    handle = f"{day}_{uuid.uuid4().hex}_{basename}"
    return f"{handle}.{extension}" if extension else handle


class LocalBlobStore:
    """Stores blobs as files in one directory, addressed by handle."""

    def __init__(self, base_dir: Path):
        """Initialize and create ``base_dir`` if needed."""
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def save(self, data: bytes, original_name: str) -> str:
        """Write bytes under a new handle and return it."""
        handle = make_blob_handle(original_name)
        self.path_for(handle).write_bytes(data)
        logger.debug("Saved blob %s (%d bytes)", handle, len(data))
        return handle

    def read(self, handle: str) -> bytes:
        """Return the stored bytes. Raises FileNotFoundError if absent."""
        return self.path_for(handle).read_bytes()

    def delete(self, handle: str) -> bool:
        """Remove a blob. Returns False if it was already gone."""
        path = self.path_for(handle)
        if not path.exists():
            return False
        path.unlink()
        logger.debug("Deleted blob %s", handle)
        return True

    def path_for(self, handle: str) -> Path:
        """Resolve a handle to its path, rejecting anything outside ``base_dir``."""
        if not handle or Path(handle).name != handle or handle in (".", ".."):
            raise ValueError(f"Invalid blob handle: {handle!r}")
        return self.base_dir / handle
