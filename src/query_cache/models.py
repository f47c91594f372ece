from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, TypeAdapter

# An artifact payload: an ordered list of string-keyed row mappings
RowSet = list[dict[str, Any]]
ROW_SET_ADAPTER: TypeAdapter[RowSet] = TypeAdapter(RowSet)


class CacheStats(BaseModel):
    """Cache statistics."""

    namespace: str
    extension: str
    ttl_seconds: int
    total_entries: int
    total_fetches: int
    cache_hits: int
    cache_misses: int
    refreshes: int
    fallbacks: int
    hit_rate: float
    avg_fetch_time_ms: float

    model_config = {"extra": "allow"}


@dataclass
class FetchMetrics:
    """Track counters for fetch operations."""

    total_fetches: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    refreshes: int = 0
    fallbacks: int = 0
    write_failures: int = 0
    read_failures: int = 0
    total_fetch_time_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        if self.total_fetches == 0:
            return 0.0
        return self.cache_hits / self.total_fetches

    @property
    def avg_fetch_time_ms(self) -> float:
        """Calculate average fetch time."""
        if self.total_fetches == 0:
            return 0.0
        return self.total_fetch_time_ms / self.total_fetches

    def record_hit(self, fetch_time_ms: float) -> None:
        """Record a fetch served from a fresh artifact."""
        self.total_fetches += 1
        self.cache_hits += 1
        self.total_fetch_time_ms += fetch_time_ms

    def record_miss(self, fetch_time_ms: float) -> None:
        """Record a fetch that needed the live source."""
        self.total_fetches += 1
        self.cache_misses += 1
        self.total_fetch_time_ms += fetch_time_ms

    def record_refresh(self) -> None:
        """Record an artifact rewrite."""
        self.refreshes += 1

    def record_fallback(self) -> None:
        """Record rows returned unpersisted straight from the live source."""
        self.fallbacks += 1

    def record_write_failure(self) -> None:
        self.write_failures += 1

    def record_read_failure(self) -> None:
        self.read_failures += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_fetches": self.total_fetches,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "refreshes": self.refreshes,
            "fallbacks": self.fallbacks,
            "write_failures": self.write_failures,
            "read_failures": self.read_failures,
            "hit_rate": self.hit_rate,
            "avg_fetch_time_ms": self.avg_fetch_time_ms,
        }
