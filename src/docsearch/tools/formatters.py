"""Compact output formatters for MCP tool responses."""

from docsearch.models.cache import CacheStats, QueryCount
from docsearch.models.document import BulkDeleteReport, Document, DocumentSummary
from docsearch.models.search import PaginationInfo
from docsearch.search.formatting import format_file_size, format_short_date


def format_document_header(doc: Document | DocumentSummary) -> str:
    """Format: [#12] Quarterly Report | report.pdf | 1.5 KB | Jan 5, 2024."""
    parts = [f"[#{doc.id}] {doc.title}", doc.filename, format_file_size(doc.file_size)]
    if doc.created_at is not None:
        parts.append(format_short_date(doc.created_at))
    return " | ".join(parts)


def format_document_full(doc: Document) -> str:
    """Header + MIME type + extracted text. For doc_get."""
    lines = [format_document_header(doc), f"  {doc.mime_type}"]
    lines.append("")
    lines.append(doc.content_text or "(no extracted text)")
    return "\n".join(lines)


def format_pagination(pagination: PaginationInfo) -> str:
    """Format: Page 1 of 3 (25 total) | next: 2."""
    line = (
        f"Page {pagination.current_page} of {max(pagination.total_pages, 1)}"
        f" ({pagination.total} total)"
    )
    if pagination.prev_page is not None:
        line += f" | prev: {pagination.prev_page}"
    if pagination.next_page is not None:
        line += f" | next: {pagination.next_page}"
    return line


def format_document_list(
    summaries: list[DocumentSummary],
    pagination: PaginationInfo,
) -> str:
    """One header line per document followed by the page line."""
    if not summaries:
        return "No documents found."
    lines = [format_document_header(s) for s in summaries]
    lines.append("")
    lines.append(format_pagination(pagination))
    return "\n".join(lines)


def format_cache_stats(stats: CacheStats) -> str:
    """Entry counts plus the creation-time range as unix timestamps."""
    lines = ["Search Cache Statistics\n"]
    lines.append(
        f"Entries: {stats.total_entries} total"
        f" ({stats.active_entries} active, {stats.expired_entries} expired)"
    )
    if stats.oldest_entry is not None and stats.newest_entry is not None:
        lines.append(f"Oldest: {stats.oldest_entry:.0f}  Newest: {stats.newest_entry:.0f}")
    return "\n".join(lines)


def format_query_counts(counts: list[QueryCount]) -> str:
    """Numbered ``query (N)`` lines."""
    if not counts:
        return "No cached queries."
    return "\n".join(
        f"{i}. {c.query_text} ({c.search_count})" for i, c in enumerate(counts, start=1)
    )


def format_bulk_delete(report: BulkDeleteReport) -> str:
    """Deleted ids on one line, then one line per failure."""
    deleted = ", ".join(f"#{doc_id}" for doc_id in report.deleted) or "none"
    lines = [f"Deleted {len(report.deleted)}: {deleted}"]
    if report.failed:
        lines.append(f"Failed {len(report.failed)}:")
        lines.extend(f"  #{failure.id}: {failure.reason}" for failure in report.failed)
    return "\n".join(lines)
