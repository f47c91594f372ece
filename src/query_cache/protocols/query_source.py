"""Query source protocol.

Defines the interface for the live backing store the cache sits in
front of. The cache only ever hands it a query string and expects an
ordered list of row mappings back.

Implementations can include:
- SQLAlchemy engines (MySQL, PostgreSQL, SQLite, ...) (default)
- Fakes that record calls, for tests
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class QuerySource(Protocol):
    """Protocol for live query execution.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        from query_cache.protocols import QuerySource

        source: QuerySource = SqlAlchemyQuerySource(config)
        source: QuerySource = RecordingSource(rows)
        ```
    """

    def run(self, query: str) -> list[dict[str, Any]]:
        """Execute a query against the backing store.

        Args:
            query: Query text, passed through verbatim

        Returns:
            Ordered list of row mappings (column name -> value)

        Raises:
            QueryExecutionError: On connection or syntax failure
        """
        ...

    def health_check(self) -> bool:
        """Check whether the backing store answers.

        Returns:
            True if a trivial query succeeds, False otherwise
        """
        ...

    def close(self) -> None:
        """Release the underlying connection. Safe to call more than once."""
        ...
