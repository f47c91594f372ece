"""
Shared fixtures for the query cache tests.
"""

import threading
import time
from typing import Any

import pytest

from query_cache.exceptions import QueryExecutionError
from query_cache.repositories import JsonArtifactStore
from query_cache.services import EntryCache

SAMPLE_ROWS = [{"id": "1", "name": "a"}, {"id": "2", "name": "b"}]


class RecordingSource:
    """QuerySource fake that returns canned rows and counts calls."""

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        healthy: bool = True,
    ) -> None:
        self.rows = SAMPLE_ROWS if rows is None else rows
        self.error = error
        self.delay = delay
        self.healthy = healthy
        self.queries: list[str] = []
        self.close_calls = 0
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.queries)

    def run(self, query: str) -> list[dict[str, Any]]:
        with self._lock:
            self.queries.append(query)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [dict(row) for row in self.rows]

    def health_check(self) -> bool:
        return self.healthy

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def source():
    """A recording source returning SAMPLE_ROWS."""
    return RecordingSource()


@pytest.fixture
def namespace(tmp_path):
    """A cache directory that does not exist yet."""
    return tmp_path / "cache"


@pytest.fixture
def store(namespace):
    """A JSON artifact store over the namespace."""
    return JsonArtifactStore(namespace)


@pytest.fixture
def cache(source, store):
    """An entry cache with a 1800 second default TTL."""
    with EntryCache(source=source, store=store, ttl=1800) as c:
        yield c


@pytest.fixture
def failing_source():
    """A source whose every query fails."""
    return RecordingSource(error=QueryExecutionError("Query failed: no such table", query="x"))
