"""Service layer for cache logic.

This layer contains the cache orchestration. Services depend on
protocols (interfaces), not concrete implementations, making them
testable and flexible.

Architecture:
    Caller -> Service -> Repository
              (Cache)  -> (Query source, Artifact store)

Usage:
    ```python
    from query_cache.services import EntryCache

    # Using factory method (recommended)
    cache = EntryCache.create(namespace="cache/")

    # Or manual creation
    cache = EntryCache(source=source, store=store, ttl=600)
    ```
"""

from .entry_cache import EntryCache

__all__ = [
    "EntryCache",
]
