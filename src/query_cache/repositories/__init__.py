"""Repository layer for data access.

This layer hides the external dependencies (the database, the filesystem)
behind protocol-based interfaces. This enables:
- Swapping the backing store without touching the cache logic
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from query_cache.protocols import ArtifactStore, QuerySource

from .json_artifact_store import JsonArtifactStore
from .sqlalchemy_query_source import SqlAlchemyQuerySource, build_url

__all__ = [
    "ArtifactStore",
    "QuerySource",
    "JsonArtifactStore",
    "SqlAlchemyQuerySource",
    "build_url",
]
