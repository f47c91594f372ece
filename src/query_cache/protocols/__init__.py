"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Swapping the backing store (MySQL → PostgreSQL, SQLAlchemy → anything with run())
- Unit testing with fake sources and stores
- Clear separation of concerns

Usage:
    ```python
    from query_cache.protocols import ArtifactStore, QuerySource

    source: QuerySource = SqlAlchemyQuerySource(config)
    store: ArtifactStore = JsonArtifactStore("cache/")
    ```
"""

from .artifact_store import ArtifactStore
from .query_source import QuerySource

__all__ = [
    "ArtifactStore",
    "QuerySource",
]
