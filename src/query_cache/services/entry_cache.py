"""Entry cache service for core cache logic.

This service decides whether the artifact for a key can be served,
refreshes it from the query source when it cannot, and degrades to a
live query whenever storage misbehaves.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Any

from query_cache.config import settings
from query_cache.entities import ConnectionConfig
from query_cache.exceptions import CacheReadError, CacheWriteError, NamespaceUnavailableError
from query_cache.models import CacheStats, FetchMetrics
from query_cache.protocols import ArtifactStore, QuerySource
from query_cache.repositories import JsonArtifactStore, SqlAlchemyQuerySource

logger = logging.getLogger(__name__)


class EntryCache:
    """Core cache orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - QuerySource: the live backing store (SQLAlchemy by default)
    - ArtifactStore: the on-disk namespace (JSON files by default)

    Storage failures never fail a fetch: an unusable namespace, a failed
    write or a corrupt artifact all fall back to the live result. Only
    QueryExecutionError from the source reaches the caller.

    Refreshes are serialized per key, so concurrent fetches of one stale
    key issue a single query and the waiting callers read its artifact.

    Example:
        ```python
        from query_cache.entities import ConnectionConfig
        from query_cache.services import EntryCache

        config = ConnectionConfig(host="localhost", user="app", password="secret", database="shop")
        with EntryCache.create(connection=config, namespace="cache/") as cache:
            rows = cache.fetch("SELECT * FROM test WHERE id = 1", "test1")
        ```
    """

    def __init__(
        self,
        source: QuerySource,
        store: ArtifactStore,
        ttl: int | None = None,
    ) -> None:
        """Initialize the entry cache.

        Args:
            source: Live query source (required).
            store: Artifact storage backend (required).
            ttl: Default maximum artifact age in seconds. Defaults to settings.
        """
        self._source = source
        self._store = store
        self._ttl = settings.cache_ttl if ttl is None else ttl
        if self._ttl < 0:
            raise ValueError("TTL must be >= 0")

        self._metrics = FetchMetrics()
        self._lock = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}

    @classmethod
    def create(
        cls,
        connection: ConnectionConfig | None = None,
        namespace: str | Path | None = None,
        extension: str | None = None,
        ttl: int | None = None,
    ) -> "EntryCache":
        """Factory method to create EntryCache with the default backends.

        Args:
            connection: Database connection parameters. If None, uses settings.
            namespace: Cache directory. If None, uses settings.
            extension: Artifact extension. If None, uses settings.
            ttl: Default TTL in seconds. If None, uses settings.

        Returns:
            EntryCache backed by SqlAlchemyQuerySource and JsonArtifactStore
        """
        return cls(
            source=SqlAlchemyQuerySource.create(config=connection),
            store=JsonArtifactStore.create(namespace=namespace, extension=extension),
            ttl=ttl,
        )

    def fetch(
        self,
        query: str,
        key: str,
        extension: str | None = None,
        ttl: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return the rows for a query, from the cache when fresh.

        Business logic:
        1. Ensure the namespace exists; an unusable one means a live query
        2. Refresh the artifact if it is absent or older than ttl
        3. Read the artifact back and return its rows

        Args:
            query: Query text, passed verbatim to the source
            key: Artifact identifier; must be safe to use in a file name
            extension: Override the default artifact extension
            ttl: Maximum artifact age in seconds; 0 always refreshes

        Returns:
            Ordered list of row mappings

        Raises:
            QueryExecutionError: If the live query fails
        """
        ttl = self._ttl if ttl is None else ttl
        extension = self._store.extension if extension is None else extension
        start_time = time.time()

        try:
            created = self._store.ensure_namespace()
        except NamespaceUnavailableError as e:
            logger.warning("Cache namespace unavailable, querying live: %s", e)
            rows = self._source.run(query)
            self._record(start_time, hit=False, fallback=True)
            return rows

        if created:
            logger.debug("Created namespace %s, %r is a forced miss", self._store.namespace, key)

        # A namespace created just now is empty, so the lookup below misses
        live_rows: list[dict[str, Any]] | None = None
        entry = self._store.lookup(key, extension)

        if entry.is_stale(ttl, time.time()):
            with self._key_lock(key):
                # Another caller may have refreshed while we waited
                entry = self._store.lookup(key, extension)
                if entry.is_stale(ttl, time.time()):
                    logger.debug("Cache miss for %r, refreshing %s", key, entry.path)
                    live_rows = self._source.run(query)
                    try:
                        self._store.write(key, live_rows, extension)
                    except CacheWriteError as e:
                        logger.warning("Cache write failed, returning live rows: %s", e)
                        with self._lock:
                            self._metrics.record_write_failure()
                        self._record(start_time, hit=False, fallback=True)
                        return live_rows
                    with self._lock:
                        self._metrics.record_refresh()

        try:
            rows = self._store.read(key, extension)
        except CacheReadError as e:
            logger.warning("Cache read failed, querying live: %s", e)
            with self._lock:
                self._metrics.record_read_failure()
            if live_rows is None:
                live_rows = self._source.run(query)
            self._record(start_time, hit=False, fallback=True)
            return live_rows

        if live_rows is None:
            logger.debug("Cache hit for %r", key)
        self._record(start_time, hit=live_rows is None)
        return rows

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def _forget_key_locks(self, *keys: str) -> None:
        """Drop idle refresh locks; all of them when no key is given."""
        with self._lock:
            for key in keys or list(self._key_locks):
                lock = self._key_locks.get(key)
                if lock is not None and not lock.locked():
                    del self._key_locks[key]

    def _record(self, start_time: float, hit: bool, fallback: bool = False) -> None:
        fetch_time_ms = (time.time() - start_time) * 1000
        with self._lock:
            if hit:
                self._metrics.record_hit(fetch_time_ms)
            else:
                self._metrics.record_miss(fetch_time_ms)
            if fallback:
                self._metrics.record_fallback()

    def invalidate(self, key: str, extension: str | None = None) -> bool:
        """Delete the artifact for one key, forcing its next fetch to miss.

        Args:
            key: The cache key
            extension: Override the default artifact extension

        Returns:
            True if an artifact was deleted, False otherwise
        """
        deleted = self._store.delete(key, extension)
        self._forget_key_locks(key)
        return deleted

    def clear_all(self) -> int:
        """Delete every artifact in the namespace.

        Safe to call on an empty or missing namespace.

        Returns:
            Number of files deleted
        """
        count = self._store.clear_all()
        self._forget_key_locks()
        logger.info("Cleared %d file(s) from %s", count, self._store.namespace)
        return count

    def get_stats(self) -> CacheStats:
        """Get cache statistics.

        Returns:
            CacheStats with namespace details and fetch counters
        """
        with self._lock:
            counters = self._metrics.to_dict()
        return CacheStats(
            namespace=str(self._store.namespace),
            extension=self._store.extension,
            ttl_seconds=self._ttl,
            total_entries=self._store.count_all(),
            **counters,
        )

    def reset_metrics(self) -> None:
        """Reset the fetch counters."""
        with self._lock:
            self._metrics = FetchMetrics()

    def is_healthy(self) -> bool:
        """Check if cache is healthy.

        Returns:
            True if the namespace is usable and the source answers
        """
        store_healthy = self._store.health_check()
        return store_healthy and self._source.health_check()

    def set_ttl(self, ttl: int) -> None:
        """Update the default TTL.

        Args:
            ttl: New TTL in seconds (0 = always refresh)
        """
        if ttl < 0:
            raise ValueError("TTL must be >= 0")
        self._ttl = ttl

    def close(self) -> None:
        """Release the query source connection. Safe to call more than once."""
        self._source.close()

    def __enter__(self) -> "EntryCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def ttl(self) -> int:
        """Get the default TTL in seconds."""
        return self._ttl

    @property
    def metrics(self) -> FetchMetrics:
        """Get the fetch counters."""
        return self._metrics

    @property
    def source(self) -> QuerySource:
        """Get the underlying query source (for testing)."""
        return self._source

    @property
    def store(self) -> ArtifactStore:
        """Get the underlying artifact store (for testing)."""
        return self._store
