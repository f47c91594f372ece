"""Exception hierarchy for query_cache.

All exceptions inherit from :class:`QueryCacheError`. Only
:class:`QueryExecutionError` ever reaches the caller of
:meth:`~query_cache.services.EntryCache.fetch`; the storage errors are
raised by the artifact store and absorbed by the service, which degrades
to a live query instead.

Subclass hierarchy::

    QueryCacheError
    +-- QueryExecutionError        (fatal, propagated)
    +-- NamespaceUnavailableError  (absorbed, live fallback)
    +-- CacheWriteError            (absorbed, live rows returned)
    +-- CacheReadError             (absorbed, treated as a miss)
"""


class QueryCacheError(Exception):
    """Base exception for all query_cache errors."""


class QueryExecutionError(QueryCacheError):
    """Raised when the backing store cannot run a query (connection or syntax failure)."""

    def __init__(self, message: str, query: str | None = None):
        super().__init__(message)
        self.query = query


class NamespaceUnavailableError(QueryCacheError):
    """Raised when the namespace directory is missing and cannot be created, or is not writable."""


class CacheWriteError(QueryCacheError):
    """Raised when a result set cannot be serialized or written to its artifact."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class CacheReadError(QueryCacheError):
    """Raised when an artifact is unreadable or does not hold a list of row mappings."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key
