"""Tests for the document upload path."""

import threading

import pytest
import pytest_asyncio

from docsearch.errors import DocumentNotFoundError, ExtractionError
from docsearch.ingest import ingester as ingester_module
from docsearch.ingest.blob_store import LocalBlobStore
from docsearch.ingest.ingester import DocumentIngester, guess_mime_type, title_from_filename
from docsearch.search.engine import RelevanceEngine
from docsearch.search.query_builder import build_engine_query


@pytest_asyncio.fixture
async def blobs(tmp_path):
    return LocalBlobStore(tmp_path / "uploads")


@pytest_asyncio.fixture
async def ingester(store, blobs):
    return DocumentIngester(store, blobs, max_file_size=1024)


def stored_files(blobs: LocalBlobStore) -> list[str]:
    return sorted(p.name for p in blobs.base_dir.iterdir())


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("my_report-2024.pdf", "My Report 2024"),
        ("MEETING_NOTES.txt", "Meeting Notes"),
        ("plain.txt", "Plain"),
        ("a__b--c.txt", "A B C"),
    ],
)
def test_title_from_filename(filename, expected):
    assert title_from_filename(filename) == expected


def test_guess_mime_type(tmp_path):
    assert guess_mime_type(tmp_path / "a.txt") == "text/plain"
    assert guess_mime_type(tmp_path / "a.PDF") == "application/pdf"
    assert guess_mime_type(tmp_path / "a.docx") is None


@pytest.mark.asyncio
async def test_ingest_text(ingester, blobs, db):
    doc = await ingester.ingest(b"The walrus said hello.", "sea_notes.txt", "text/plain")

    assert doc.title == "Sea Notes"
    assert doc.filename == "sea_notes.txt"
    assert doc.file_size == 22
    assert doc.content_text == "The walrus said hello."
    assert stored_files(blobs) == [doc.blob_handle]

    page = await RelevanceEngine(db).search_ranked(build_engine_query("walrus", "natural"), 1, 10)
    assert [r.id for r in page.rows] == [doc.id]


@pytest.mark.asyncio
async def test_ingest_explicit_title(ingester):
    doc = await ingester.ingest(b"body", "x.txt", "text/plain", title="  Custom  ")
    assert doc.title == "Custom"


@pytest.mark.asyncio
async def test_ingest_rejects_oversized(ingester, blobs):
    with pytest.raises(ValueError, match="maximum allowed size"):
        await ingester.ingest(b"x" * 1025, "big.txt", "text/plain")
    assert stored_files(blobs) == []


@pytest.mark.asyncio
async def test_ingest_rejects_empty(ingester):
    with pytest.raises(ValueError, match="empty"):
        await ingester.ingest(b"", "empty.txt", "text/plain")


@pytest.mark.asyncio
async def test_ingest_rejects_unsupported_type(ingester, blobs):
    with pytest.raises(ExtractionError):
        await ingester.ingest(b"<p>x</p>", "page.html", "text/html")
    assert stored_files(blobs) == []


@pytest.mark.asyncio
async def test_failed_extraction_removes_blob(ingester, blobs, store):
    with pytest.raises(ExtractionError):
        await ingester.ingest(b"garbage", "broken.pdf", "application/pdf")

    assert stored_files(blobs) == []
    summaries, _ = await store.list_documents()
    assert summaries == []


@pytest.mark.asyncio
async def test_ingest_path(ingester, tmp_path):
    path = tmp_path / "field_report.txt"
    path.write_bytes(b"observations from the field")

    doc = await ingester.ingest_path(path)
    assert doc.title == "Field Report"
    assert doc.mime_type == "text/plain"


@pytest.mark.asyncio
async def test_ingest_path_rejects_unknown_extension(ingester, tmp_path):
    path = tmp_path / "slides.pptx"
    path.write_bytes(b"x")

    with pytest.raises(ExtractionError, match="Unsupported file extension"):
        await ingester.ingest_path(path)


@pytest.mark.asyncio
async def test_remove(ingester, blobs, store):
    doc = await ingester.ingest(b"temporary", "tmp.txt", "text/plain")

    removed = await ingester.remove(doc.id)
    assert removed.id == doc.id
    assert await store.find_by_id(doc.id) is None
    assert stored_files(blobs) == []


@pytest.mark.asyncio
async def test_remove_missing(ingester):
    with pytest.raises(DocumentNotFoundError):
        await ingester.remove(404)


@pytest.mark.asyncio
async def test_remove_tolerates_missing_blob(ingester, blobs, store):
    doc = await ingester.ingest(b"temporary", "tmp.txt", "text/plain")
    blobs.delete(doc.blob_handle)

    await ingester.remove(doc.id)
    assert await store.find_by_id(doc.id) is None


@pytest.mark.asyncio
async def test_remove_many_reports_each_id(ingester, blobs, store):
    first = await ingester.ingest(b"first", "one.txt", "text/plain")
    second = await ingester.ingest(b"second", "two.txt", "text/plain")

    report = await ingester.remove_many([first.id, 404, second.id, first.id])

    assert report.deleted == [first.id, second.id]
    assert [(f.id, f.reason) for f in report.failed] == [
        (404, "Document not found"),
        (first.id, "Document not found"),
    ]
    assert stored_files(blobs) == []
    summaries, _ = await store.list_documents()
    assert summaries == []


@pytest.mark.asyncio
async def test_remove_many_empty(ingester):
    report = await ingester.remove_many([])
    assert report.deleted == []
    assert report.failed == []


@pytest.mark.asyncio
async def test_read_original(ingester):
    doc = await ingester.ingest(b"raw bytes\r\nkept as uploaded", "raw.txt", "text/plain")

    found, data = await ingester.read_original(doc.id)

    assert found.id == doc.id
    assert data == b"raw bytes\r\nkept as uploaded"


@pytest.mark.asyncio
async def test_read_original_missing_document(ingester):
    with pytest.raises(DocumentNotFoundError, match="Document 404 not found"):
        await ingester.read_original(404)


@pytest.mark.asyncio
async def test_read_original_missing_blob(ingester, blobs):
    doc = await ingester.ingest(b"short lived", "gone.txt", "text/plain")
    blobs.delete(doc.blob_handle)

    with pytest.raises(DocumentNotFoundError, match="not found on disk"):
        await ingester.read_original(doc.id)


@pytest.mark.asyncio
async def test_extraction_runs_off_the_event_loop_thread(ingester, monkeypatch):
    loop_thread = threading.get_ident()
    extract_threads: list[int] = []

    def recording_extract(data, mime_type):
        extract_threads.append(threading.get_ident())
        return data.decode()

    monkeypatch.setattr(ingester_module, "extract_text", recording_extract)

    doc = await ingester.ingest(b"threaded text", "t.txt", "text/plain")

    assert doc.content_text == "threaded text"
    assert extract_threads and extract_threads[0] != loop_thread
