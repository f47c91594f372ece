"""Artifact storage protocol.

Defines the interface for the namespace that holds serialized query
results, one artifact per key.
"""

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from query_cache.entities import CacheEntryEntity


@runtime_checkable
class ArtifactStore(Protocol):
    """Protocol for artifact storage backends."""

    @property
    def namespace(self) -> Path:
        """Return the directory scoping this store's artifacts."""
        ...

    @property
    def extension(self) -> str:
        """Return the default artifact extension (e.g. ".json")."""
        ...

    def ensure_namespace(self) -> bool:
        """Make sure the namespace exists and is writable.

        Returns:
            True if the namespace had to be created, False if it existed

        Raises:
            NamespaceUnavailableError: If it cannot be created or written to
        """
        ...

    def lookup(self, key: str, extension: str | None = None) -> CacheEntryEntity:
        """Describe the artifact for a key without reading its payload.

        Args:
            key: The cache key
            extension: Override the default extension

        Returns:
            Entity whose last_refreshed is None when no artifact exists
        """
        ...

    def read(self, key: str, extension: str | None = None) -> list[dict[str, Any]]:
        """Read and deserialize an artifact.

        Raises:
            CacheReadError: If the artifact is unreadable or corrupt
        """
        ...

    def write(
        self,
        key: str,
        rows: list[dict[str, Any]],
        extension: str | None = None,
    ) -> Path:
        """Serialize rows and atomically replace the artifact.

        Returns:
            Path of the written artifact

        Raises:
            CacheWriteError: If serialization or the write fails
        """
        ...

    def delete(self, key: str, extension: str | None = None) -> bool:
        """Delete one artifact.

        Returns:
            True if deleted, False if it did not exist
        """
        ...

    def clear_all(self) -> int:
        """Delete every regular file directly inside the namespace.

        Returns:
            Number of files deleted
        """
        ...

    def count_all(self) -> int:
        """Count the artifacts directly inside the namespace."""
        ...

    def health_check(self) -> bool:
        """Check if the namespace is usable."""
        ...
