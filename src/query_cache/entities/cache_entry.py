"""Cache entry domain entity."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for one cached query result.

    The entity describes an artifact as it exists on disk at lookup time.
    The refresh timestamp is the artifact's modification time and is never
    stored inside the artifact itself.

    Attributes:
        key: The caller-supplied identifier
        path: Where the artifact lives (``<namespace>/<key><extension>``)
        last_refreshed: Artifact mtime as a Unix timestamp, None if absent
    """

    key: str
    path: Path
    last_refreshed: float | None = None

    @property
    def exists(self) -> bool:
        """Whether an artifact was found for this key."""
        return self.last_refreshed is not None

    @property
    def last_refreshed_datetime(self) -> datetime | None:
        """Convert the refresh timestamp to datetime."""
        if self.last_refreshed is None:
            return None
        return datetime.fromtimestamp(self.last_refreshed)

    def age(self, now: float) -> float | None:
        """Seconds since the last refresh, or None if the artifact is absent."""
        if self.last_refreshed is None:
            return None
        return now - self.last_refreshed

    def is_stale(self, ttl: int, now: float) -> bool:
        """Check whether the entry must be refreshed.

        Args:
            ttl: Maximum age in seconds; 0 means always stale
            now: Current Unix timestamp

        Returns:
            True if the artifact is absent, ttl is 0, or it is older than ttl
        """
        age = self.age(now)
        if age is None or ttl <= 0:
            return True
        return age > ttl
