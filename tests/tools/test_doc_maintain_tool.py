"""Tests for the doc_maintain MCP tool."""

import pytest

from docsearch.config import is_manager_mode
from docsearch.tools.doc_maintain import (
    _ACTIONS,
    _action_document_stats,
    _action_invalidate,
    _action_vacuum,
)
from tests.conftest import add_document

# --- Manager mode gating ---


def test_manager_mode_gating(monkeypatch):
    """is_manager_mode() should respond to DS_MANAGER env var."""
    monkeypatch.delenv("DS_MANAGER", raising=False)
    assert is_manager_mode() is False

    monkeypatch.setenv("DS_MANAGER", "TRUE")
    assert is_manager_mode() is True

    monkeypatch.setenv("DS_MANAGER", "true")
    assert is_manager_mode() is True

    monkeypatch.setenv("DS_MANAGER", "false")
    assert is_manager_mode() is False


def test_action_set():
    assert {"cache_stats", "clear_cache", "invalidate", "vacuum"} <= _ACTIONS
    assert "nonexistent" not in _ACTIONS


# --- Invalidate ---


@pytest.mark.asyncio
async def test_invalidate_requires_pattern(service):
    result = await _action_invalidate(service, None)
    assert result.startswith("Error: pattern is required")


@pytest.mark.asyncio
async def test_invalidate(service, store):
    await add_document(store, "Doc", "harvest moon")
    await service.search("harvest")
    await service.search("moon")

    result = await _action_invalidate(service, "harv")
    assert result == "Invalidated 1 cache entries matching 'harv'."
    assert (await service.cache_stats()).total_entries == 1


# --- Document stats ---


@pytest.mark.asyncio
async def test_document_stats_empty(store):
    result = await _action_document_stats(store)
    assert "Document Statistics" in result
    assert "Documents: 0 (0 B total)" in result


@pytest.mark.asyncio
async def test_document_stats(store):
    await add_document(store, "A", "a", file_size=1024, mime_type="text/plain")
    await add_document(store, "B", "b", file_size=1024, mime_type="application/pdf")

    result = await _action_document_stats(store)
    assert "Documents: 2 (2 KB total)" in result
    assert "  application/pdf: 1" in result
    assert "  text/plain: 1" in result


# --- Vacuum ---


@pytest.mark.asyncio
async def test_vacuum_in_memory(db):
    result = await _action_vacuum(db)
    assert result.startswith("Vacuum complete.")


@pytest.mark.asyncio
async def test_vacuum_rejects_other_databases():
    result = await _action_vacuum(object())
    assert result.startswith("Error:")
