"""Tests for document query helpers."""

import sqlite3
from datetime import UTC, datetime, timedelta

import pytest

from docsearch.db.queries import (
    delete_document,
    get_document,
    get_document_stats,
    get_document_text,
    insert_document,
    list_documents,
    suggest_titles,
    update_document_title,
)
from docsearch.models.search import SortBy, SortOrder


async def _insert(db, title: str, **overrides) -> int:
    fields = {
        "title": title,
        "filename": f"{title}.txt",
        "content_text": f"text of {title}",
        "file_size": 10,
        "mime_type": "text/plain",
    }
    fields.update(overrides)
    return await insert_document(db, **fields)


@pytest.mark.asyncio
async def test_insert_and_get(db):
    doc_id = await _insert(db, "alpha", blob_handle="h1")

    doc = await get_document(db, doc_id)
    assert doc is not None
    assert doc.title == "alpha"
    assert doc.content_text == "text of alpha"
    assert doc.blob_handle == "h1"


@pytest.mark.asyncio
async def test_ids_are_sequential(db):
    assert await _insert(db, "a") == 1
    assert await _insert(db, "b") == 2


@pytest.mark.asyncio
async def test_get_document_text(db):
    doc_id = await _insert(db, "alpha")
    empty_id = await _insert(db, "beta", content_text="")

    assert await get_document_text(db, doc_id) == "text of alpha"
    assert await get_document_text(db, empty_id) is None
    assert await get_document_text(db, 42) is None


@pytest.mark.asyncio
async def test_update_title(db):
    doc_id = await _insert(db, "alpha")

    assert await update_document_title(db, doc_id, "omega") is True
    assert (await get_document(db, doc_id)).title == "omega"
    assert await update_document_title(db, 42, "x") is False


@pytest.mark.asyncio
async def test_delete(db):
    doc_id = await _insert(db, "alpha")

    assert await delete_document(db, doc_id) is True
    assert await get_document(db, doc_id) is None
    assert await delete_document(db, doc_id) is False


@pytest.mark.asyncio
async def test_list_documents_by_title(db):
    for title in ["charlie", "Alpha", "bravo"]:
        await _insert(db, title)

    summaries, total = await list_documents(db, 1, 10, SortBy.TITLE, SortOrder.ASC)
    assert total == 3
    assert [s.title for s in summaries] == ["Alpha", "bravo", "charlie"]


@pytest.mark.asyncio
async def test_list_documents_offset(db):
    for i in range(5):
        await _insert(db, f"doc{i}", created_at=datetime(2024, 1, 1 + i, tzinfo=UTC))

    summaries, total = await list_documents(db, 2, 2, SortBy.CREATED_AT, SortOrder.ASC)
    assert total == 5
    assert [s.title for s in summaries] == ["doc2", "doc3"]


@pytest.mark.asyncio
async def test_suggest_titles(db):
    for title in ["Report B", "report a", "Memo"]:
        await _insert(db, title)

    assert await suggest_titles(db, "rep") == ["report a", "Report B"]
    assert await suggest_titles(db, "rep", limit=1) == ["report a"]


@pytest.mark.asyncio
async def test_document_stats_by_month(db):
    recent = datetime.now(UTC) - timedelta(days=1)
    old = datetime.now(UTC) - timedelta(days=800)
    await _insert(db, "recent", created_at=recent, file_size=5)
    await _insert(db, "old", created_at=old, file_size=7)

    stats = await get_document_stats(db)
    assert stats["total_documents"] == 2
    assert stats["total_size"] == 12
    assert stats["by_month"] == {recent.strftime("%Y-%m"): 1}


class FailingWrites:
    """Wraps a database; statements starting with ``verb`` raise."""

    def __init__(self, db, verb: str):
        self.db = db
        self.verb = verb
        self.rollbacks = 0

    async def execute(self, sql, params=()):
        if sql.lstrip().upper().startswith(self.verb):
            raise sqlite3.OperationalError("disk I/O error")
        return await self.db.execute(sql, params)

    async def commit(self):
        await self.db.commit()

    async def rollback(self):
        self.rollbacks += 1
        await self.db.rollback()


@pytest.mark.asyncio
@pytest.mark.parametrize("verb", ["INSERT", "UPDATE", "DELETE"])
async def test_failed_write_rolls_back(db, verb):
    doc_id = await _insert(db, "survivor")
    failing = FailingWrites(db, verb)

    with pytest.raises(sqlite3.OperationalError):
        match verb:
            case "INSERT":
                await _insert(failing, "doomed")
            case "UPDATE":
                await update_document_title(failing, doc_id, "renamed")
            case "DELETE":
                await delete_document(failing, doc_id)

    assert failing.rollbacks == 1
    doc = await get_document(db, doc_id)
    assert doc is not None
    assert doc.title == "survivor"
    assert await _insert(db, "after") > doc_id
