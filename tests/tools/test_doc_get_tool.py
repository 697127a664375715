"""Tests for the document retrieval and management tools."""

import pytest
import pytest_asyncio

from docsearch.ingest.blob_store import LocalBlobStore
from docsearch.ingest.ingester import DocumentIngester
from docsearch.tools.doc_get import _save_original


@pytest_asyncio.fixture
async def ingester(store, tmp_path):
    return DocumentIngester(store, LocalBlobStore(tmp_path / "uploads"))


@pytest.fixture
def downloads(tmp_path):
    path = tmp_path / "downloads"
    path.mkdir()
    return path


@pytest.mark.asyncio
async def test_save_into_directory(ingester, downloads):
    doc = await ingester.ingest(b"field notes", "notes.txt", "text/plain")

    result = await _save_original(ingester, doc.id, downloads)

    assert result.startswith(f"Saved [#{doc.id}] Notes to ")
    assert result.endswith("(11 B)")
    assert (downloads / "notes.txt").read_bytes() == b"field notes"


@pytest.mark.asyncio
async def test_save_to_new_file(ingester, downloads):
    doc = await ingester.ingest(b"field notes", "notes.txt", "text/plain")
    target = downloads / "copy.txt"

    await _save_original(ingester, doc.id, target)

    assert target.read_bytes() == b"field notes"


@pytest.mark.asyncio
async def test_never_overwrites(ingester, downloads):
    doc = await ingester.ingest(b"field notes", "notes.txt", "text/plain")
    (downloads / "notes.txt").write_bytes(b"keep me")

    result = await _save_original(ingester, doc.id, downloads)

    assert result.startswith("Error:")
    assert "already exists" in result
    assert (downloads / "notes.txt").read_bytes() == b"keep me"


@pytest.mark.asyncio
async def test_missing_parent_directory(ingester, downloads):
    doc = await ingester.ingest(b"field notes", "notes.txt", "text/plain")

    result = await _save_original(ingester, doc.id, downloads / "nope" / "copy.txt")

    assert result.startswith("Error: Directory not found")


@pytest.mark.asyncio
async def test_missing_document(ingester, downloads):
    result = await _save_original(ingester, 404, downloads)

    assert result == "Error: Document 404 not found."
    assert list(downloads.iterdir()) == []
