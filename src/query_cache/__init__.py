"""Query Cache - time-bounded on-disk caching of relational query results.

This package provides a layered architecture for query result caching:

Layers:
    - protocols: Interface contracts (QuerySource, ArtifactStore)
    - repositories: Data access implementations (SQLAlchemy, JSON files)
    - services: Cache logic (EntryCache)
    - entities: Domain models (internal)

Usage:
    ```python
    from query_cache import ConnectionConfig, EntryCache

    config = ConnectionConfig(host="localhost", user="username", password="password", database="dbcache")
    with EntryCache.create(connection=config) as cache:
        data1 = cache.fetch("SELECT * FROM test WHERE id = 1", "test1")
        data2 = cache.fetch("SELECT * FROM test WHERE id = 2", "test2", ttl=60)
    ```
"""

from query_cache.config import get_connection_config, settings
from query_cache.entities import CacheEntryEntity, ConnectionConfig
from query_cache.exceptions import (
    CacheReadError,
    CacheWriteError,
    NamespaceUnavailableError,
    QueryCacheError,
    QueryExecutionError,
)
from query_cache.models import CacheStats, FetchMetrics
from query_cache.protocols import ArtifactStore, QuerySource
from query_cache.repositories import JsonArtifactStore, SqlAlchemyQuerySource
from query_cache.services import EntryCache

__all__ = [
    # Configuration
    "settings",
    "get_connection_config",
    # Protocols (interfaces)
    "ArtifactStore",
    "QuerySource",
    # Services (cache logic)
    "EntryCache",
    # Repositories (data access)
    "JsonArtifactStore",
    "SqlAlchemyQuerySource",
    # Entities (domain models)
    "CacheEntryEntity",
    "ConnectionConfig",
    # Models
    "CacheStats",
    "FetchMetrics",
    # Errors
    "QueryCacheError",
    "QueryExecutionError",
    "NamespaceUnavailableError",
    "CacheWriteError",
    "CacheReadError",
]
