"""FTS5/BM25 ranked search over documents.

Engine queries arrive in one of two operator dialects:

- natural language: free text; a document matches if it contains any word.
- boolean: ``+term`` required, ``-term`` excluded, bare terms optional,
  ``"quoted phrases"``, ``(groups)`` and ``term*`` prefixes.

Both are compiled into an FTS5 MATCH expression. Every user word is quoted
so FTS5 keywords and punctuation in the input can never change the query
structure.
"""

import logging
import re
import sqlite3
from datetime import datetime

from docsearch.db.backend import Database
from docsearch.errors import EngineError
from docsearch.models.search import (
    EngineQuery,
    OperatorMode,
    RankedPage,
    RawMatch,
    SortBy,
    SortOrder,
)

logger = logging.getLogger(__name__)

_ORDER_COLUMNS: dict[SortBy, str] = {
    SortBy.RELEVANCE: "relevance_score",
    SortBy.CREATED_AT: "d.created_at",
    SortBy.TITLE: "d.title COLLATE NOCASE",
    SortBy.FILE_SIZE: "d.file_size",
}

_WORD_RE = re.compile(r"\w+")
_BARE_TOKEN_RE = re.compile(r'[^\s()"]+')
_HAS_WORD_RE = re.compile(r"\w")

# MySQL-style modifiers that only affect ranking weight there; accepted and ignored
_IGNORED_OPERATORS = "~<>"


class RelevanceEngine:
    """Runs ranked full-text queries against the document index."""

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def search_ranked(
        self,
        engine_query: EngineQuery,
        page: int,
        limit: int,
        sort_by: SortBy = SortBy.RELEVANCE,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> RankedPage:
        """Return one page of matching documents and the total match count.

        Relevance is ``-bm25()`` so that larger scores are better matches.
        Ties are broken by ascending document id.
        """
        match_expr = compile_match_expression(engine_query)
        if match_expr is None:
            return RankedPage(rows=[], total=0)

        column = _ORDER_COLUMNS[sort_by]
        sql = f"""
            SELECT d.id, d.title, d.filename, d.file_size, d.mime_type, d.created_at,
                   -bm25(documents_fts) AS relevance_score
            FROM documents_fts
            JOIN documents d ON d.id = documents_fts.rowid
            WHERE documents_fts MATCH ?
            ORDER BY {column} {sort_order.value}, d.id ASC
            LIMIT ? OFFSET ?
        """  # noqa: S608

        try:
            cursor = await self.db.execute(
                "SELECT COUNT(*) FROM documents_fts WHERE documents_fts MATCH ?", (match_expr,)
            )
            row = await cursor.fetchone()
            total = row[0] if row else 0

            cursor = await self.db.execute(sql, (match_expr, limit, (page - 1) * limit))
            rows = await cursor.fetchall()
        except sqlite3.Error as e:
            logger.warning("FTS query failed: %s", match_expr, exc_info=True)
            raise EngineError(f"Search failed for query '{engine_query.text}': {e}") from e

        return RankedPage(
            rows=[
                RawMatch(
                    id=r["id"],
                    title=r["title"],
                    filename=r["filename"],
                    file_size=r["file_size"],
                    mime_type=r["mime_type"],
                    created_at=datetime.fromisoformat(r["created_at"]),
                    relevance_score=r["relevance_score"],
                )
                for r in rows
            ],
            total=total,
        )


def compile_match_expression(engine_query: EngineQuery) -> str | None:
    """Compile an engine query to FTS5 syntax.

    Returns None when the query has nothing that could match, e.g. empty
    text or only excluded terms.
    """
    if engine_query.operator_mode == OperatorMode.BOOLEAN:
        return _BooleanCompiler(engine_query.text).compile()
    return _compile_natural(engine_query.text)


def _compile_natural(text: str) -> str | None:
    """Any-word match: ``"w1" OR "w2" ...``."""
    seen: set[str] = set()
    words: list[str] = []
    for word in _WORD_RE.findall(text):
        key = word.casefold()
        if key not in seen:
            seen.add(key)
            words.append(_quote(word))
    return " OR ".join(words) if words else None


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


class _BooleanCompiler:
    """Recursive-descent translation of boolean-mode syntax to FTS5.

    Within a group, required terms are ANDed; when there are none the
    optional terms are ORed instead; excluded terms are subtracted with NOT.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def compile(self) -> str | None:
        return self._group(nested=False)

    def _group(self, *, nested: bool) -> str | None:
        required: list[str] = []
        optional: list[str] = []
        excluded: list[str] = []
        text = self.text

        while True:
            while self.pos < len(text) and text[self.pos].isspace():
                self.pos += 1
            if self.pos >= len(text):
                if nested:
                    raise EngineError(f"Malformed boolean query (unclosed '('): {text}")
                break
            if text[self.pos] == ")":
                if not nested:
                    raise EngineError(f"Malformed boolean query (unexpected ')'): {text}")
                self.pos += 1
                break

            op = ""
            while self.pos < len(text) and text[self.pos] in "+-" + _IGNORED_OPERATORS:
                if not op and text[self.pos] in "+-":
                    op = text[self.pos]
                self.pos += 1
            if self.pos >= len(text) or text[self.pos].isspace() or text[self.pos] == ")":
                # Dangling operator
                continue

            fragment = self._operand()
            if fragment is None:
                continue
            if op == "+":
                required.append(fragment)
            elif op == "-":
                excluded.append(fragment)
            else:
                optional.append(fragment)

        if required:
            positive = " AND ".join(required)
            parts = len(required)
        elif optional:
            positive = " OR ".join(optional)
            parts = len(optional)
        else:
            return None

        expr = f"({positive})" if parts > 1 and (excluded or nested) else positive
        for fragment in excluded:
            expr = f"{expr} NOT {fragment}"
        return f"({expr})" if excluded and nested else expr

    def _operand(self) -> str | None:
        text = self.text
        ch = text[self.pos]

        if ch == "(":
            self.pos += 1
            return self._group(nested=True)

        if ch == '"':
            end = text.find('"', self.pos + 1)
            if end == -1:
                raise EngineError(f"Malformed boolean query (unterminated quote): {text}")
            phrase = text[self.pos + 1 : end]
            self.pos = end + 1
            if not _HAS_WORD_RE.search(phrase):
                return None
            return _quote(phrase)

        match = _BARE_TOKEN_RE.match(text, self.pos)
        if match is None:
            raise EngineError(f"Malformed boolean query near position {self.pos}: {text}")
        self.pos = match.end()
        token = match.group()
        prefix = token.endswith("*")
        word = token.rstrip("*")
        if not _HAS_WORD_RE.search(word):
            return None
        return _quote(word) + ("*" if prefix else "")
