"""Mode-specific engine query construction."""

import re

from docsearch.models.search import EngineQuery, OperatorMode, SearchMode

# Boolean-mode syntax; in wildcard input these only separate words
_BOOLEAN_SYNTAX_RE = re.compile(r'[()"+\-~<>*]+')


def build_engine_query(text: str, mode: SearchMode | str) -> EngineQuery:
    """Turn raw query text into the query the relevance engine runs.

    Natural and boolean text pass through unchanged; only the operator mode
    differs. Wildcard mode turns every whitespace-separated term into a
    required prefix term, so ``cat dog`` becomes ``+cat* +dog*``. Boolean
    operator characters in wildcard input split terms the way the index
    tokenizer does, so ``foo(bar`` becomes ``+foo* +bar*``.
    Unrecognized modes are treated as natural.
    """
    match mode:
        case SearchMode.BOOLEAN:
            return EngineQuery(text=text, operator_mode=OperatorMode.BOOLEAN)
        case SearchMode.WILDCARD:
            terms = _BOOLEAN_SYNTAX_RE.sub(" ", text).split()
            wildcard = " ".join(f"+{term}*" for term in terms)
            return EngineQuery(text=wildcard, operator_mode=OperatorMode.BOOLEAN)
        case _:
            return EngineQuery(text=text, operator_mode=OperatorMode.NATURAL_LANGUAGE)
