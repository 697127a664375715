"""Exception hierarchy for the search core."""


class DocSearchError(Exception):
    """Base class for all docsearch errors."""


class InvalidParameterError(DocSearchError, ValueError):
    """A search parameter is outside its allowed set of values."""


class EngineError(DocSearchError):
    """The relevance engine rejected the query or could not be reached."""


class StoreUnavailableError(DocSearchError):
    """The document store failed while fetching a document or its text."""


class CacheBackendError(DocSearchError):
    """The cache storage medium failed to read or write."""


class ExtractionError(DocSearchError):
    """Text could not be extracted from an uploaded file."""


class DocumentNotFoundError(DocSearchError, LookupError):
    """No document exists with the requested id."""
