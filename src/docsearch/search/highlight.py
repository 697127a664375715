"""Query-term extraction, highlighting and snippet selection."""

import html
import re

from docsearch.models.search import SearchMode

MIN_TERM_LENGTH = 2
DEFAULT_SNIPPET_LENGTH = 200
DEFAULT_SNIPPET_STEP = 50
ELLIPSIS = "..."

MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"

_BOOLEAN_SPLIT_RE = re.compile(r'[\s+\-()*"]+')
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s")


def extract_terms(query: str, mode: SearchMode | str = SearchMode.NATURAL) -> list[str]:
    """Return the bare, lower-cased, de-duplicated terms of a query.

    Boolean operators and wildcard markers are stripped so the terms can be
    found in plain text. Terms shorter than two characters are dropped.
    """
    match mode:
        case SearchMode.BOOLEAN:
            raw = _BOOLEAN_SPLIT_RE.split(query)
        case SearchMode.WILDCARD:
            raw = query.replace("*", "").split()
        case _:
            raw = query.split()

    terms: list[str] = []
    for term in raw:
        term = term.strip().lower()
        if len(term) >= MIN_TERM_LENGTH and term not in terms:
            terms.append(term)
    return terms


def strip_markup(text: str) -> str:
    """Remove tags and decode entities, leaving plain text (not HTML)."""
    return html.unescape(_TAG_RE.sub("", text))


def highlight_terms(
    text: str,
    terms: list[str],
    open_tag: str = MARK_OPEN,
    close_tag: str = MARK_CLOSE,
) -> str:
    """Wrap whole-word, case-insensitive occurrences of ``terms`` in markers.

    All terms are matched in one pass, longest first, so a term can never
    match inside a marker inserted for another term. ``text`` is HTML; a
    term directly after ``&`` is an entity name and is left alone.
    """
    usable = sorted((t for t in terms if len(t) >= MIN_TERM_LENGTH), key=len, reverse=True)
    if not usable or not text:
        return text
    alternation = "|".join(re.escape(t) for t in usable)
    pattern = re.compile(rf"(?<![\w&])({alternation})(?!\w)", re.IGNORECASE)
    return pattern.sub(lambda m: f"{open_tag}{m.group(1)}{close_tag}", text)


def highlight_text(
    text: str,
    query: str,
    mode: SearchMode | str = SearchMode.NATURAL,
    open_tag: str = MARK_OPEN,
    close_tag: str = MARK_CLOSE,
) -> str:
    """Highlight the terms of ``query`` in ``text``. An empty query is a no-op."""
    return highlight_terms(text, extract_terms(query, mode), open_tag, close_tag)


def snippet_score(window: str, terms: list[str]) -> int:
    """Score a window: occurrences of each term times its length."""
    lowered = window.lower()
    return sum(lowered.count(term) * len(term) for term in terms)


def best_window_start(content: str, terms: list[str], length: int, step: int) -> int:
    """Offset of the highest-scoring window; the earliest one wins ties.

    Windows start every ``step`` characters, plus one aligned to the end of
    the text so a match in the final characters is always reachable.
    """
    if len(content) <= length or not terms:
        return 0

    last_start = len(content) - length
    starts = list(range(0, last_start + 1, step))
    if starts[-1] != last_start:
        starts.append(last_start)

    best_start = 0
    best_score = 0
    for start in starts:
        score = snippet_score(content[start : start + length], terms)
        if score > best_score:
            best_score = score
            best_start = start
    return best_start


def generate_snippet(
    content: str,
    query: str,
    mode: SearchMode | str = SearchMode.NATURAL,
    length: int = DEFAULT_SNIPPET_LENGTH,
    step: int = DEFAULT_SNIPPET_STEP,
    open_tag: str = MARK_OPEN,
    close_tag: str = MARK_CLOSE,
) -> str:
    """Pick the densest window of ``content`` for ``query`` and highlight it.

    The result is HTML: the window text is escaped before markers go in.
    """
    terms = extract_terms(query, mode)
    content = strip_markup(content)
    start = best_window_start(content, terms, length, step)
    end = min(start + length, len(content))
    snippet = content[start:end]

    # Drop a partial word at either edge of the window
    if start > 0 and not content[start - 1].isspace():
        first_space = _WHITESPACE_RE.search(snippet)
        if first_space is not None:
            snippet = snippet[first_space.end() :]
    if end < len(content) and not content[end].isspace():
        last_space = max(snippet.rfind(" "), snippet.rfind("\n"), snippet.rfind("\t"))
        if last_space != -1:
            snippet = snippet[:last_space]

    snippet = html.escape(snippet.strip(), quote=False)
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(content):
        snippet = snippet + ELLIPSIS

    return highlight_terms(snippet, terms, open_tag, close_tag)
