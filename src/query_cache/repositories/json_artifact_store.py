"""JSON file implementation of ArtifactStore.

Each key maps to one file, ``<namespace>/<key><extension>``, holding a
JSON array of row objects. Writes go to a temporary file in the same
directory and are moved into place with ``os.replace``, so a reader sees
either the previous artifact or the new one, never a partial write.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from query_cache.config import settings
from query_cache.entities import CacheEntryEntity
from query_cache.exceptions import CacheReadError, CacheWriteError, NamespaceUnavailableError
from query_cache.models import ROW_SET_ADAPTER

logger = logging.getLogger(__name__)

_TEMP_SUFFIX = ".tmp"


class JsonArtifactStore:
    """Directory-backed artifact store using JSON files.

    This class satisfies the ArtifactStore protocol through structural
    typing - no explicit inheritance needed.

    Values the JSON encoder cannot represent natively (Decimal, dates,
    bytes) are written as their ``str()`` text. Nothing is coerced back
    on read, so the round trip preserves strings exactly but does not
    restore driver types.

    Keys are embedded in file names as given. Making them safe for the
    filesystem is the caller's job.
    """

    def __init__(self, namespace: str | Path | None = None, extension: str | None = None) -> None:
        """Initialize the store.

        Args:
            namespace: Directory holding the artifacts. Defaults to settings.
            extension: Default artifact extension. Defaults to settings.
        """
        self._namespace = Path(namespace if namespace is not None else settings.cache_namespace)
        self._extension = extension if extension is not None else settings.cache_extension

    @classmethod
    def create(
        cls,
        namespace: str | Path | None = None,
        extension: str | None = None,
    ) -> "JsonArtifactStore":
        """Factory method to create JsonArtifactStore with defaults.

        Args:
            namespace: Cache directory. If None, uses settings.
            extension: Artifact extension. If None, uses settings.

        Returns:
            Configured JsonArtifactStore
        """
        return cls(namespace=namespace, extension=extension)

    @property
    def namespace(self) -> Path:
        """Get the namespace directory."""
        return self._namespace

    @property
    def extension(self) -> str:
        """Get the default artifact extension."""
        return self._extension

    def path_for(self, key: str, extension: str | None = None) -> Path:
        """Return the artifact path for a key."""
        return self._namespace / f"{key}{extension if extension is not None else self._extension}"

    def ensure_namespace(self) -> bool:
        """Make sure the namespace directory exists and is writable.

        Returns:
            True if the directory was created by this call

        Raises:
            NamespaceUnavailableError: If it cannot be created or written to
        """
        if self._namespace.is_dir():
            if not os.access(self._namespace, os.W_OK | os.X_OK):
                raise NamespaceUnavailableError(f"Namespace {self._namespace} is not writable")
            return False

        try:
            self._namespace.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise NamespaceUnavailableError(
                f"Cannot create namespace {self._namespace}: {e}"
            ) from e

        logger.info("Created cache namespace: %s", self._namespace)
        return True

    def lookup(self, key: str, extension: str | None = None) -> CacheEntryEntity:
        """Describe the artifact for a key from its file metadata.

        Args:
            key: The cache key
            extension: Override the default extension

        Returns:
            CacheEntryEntity; last_refreshed is None when there is no artifact
        """
        path = self.path_for(key, extension)
        try:
            stat = path.stat()
        except OSError:
            return CacheEntryEntity(key=key, path=path)

        if not path.is_file():
            return CacheEntryEntity(key=key, path=path)

        return CacheEntryEntity(key=key, path=path, last_refreshed=stat.st_mtime)

    def read(self, key: str, extension: str | None = None) -> list[dict[str, Any]]:
        """Read and deserialize an artifact.

        Args:
            key: The cache key
            extension: Override the default extension

        Returns:
            The cached row mappings

        Raises:
            CacheReadError: If the file is unreadable, is not valid JSON, or
                is not a list of objects
        """
        path = self.path_for(key, extension)
        try:
            text = path.read_text(encoding="utf-8")
            return ROW_SET_ADAPTER.validate_python(json.loads(text))
        except (OSError, ValueError, ValidationError) as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise CacheReadError(f"Cannot read artifact {path}: {e}", key=key) from e

    def write(
        self,
        key: str,
        rows: list[dict[str, Any]],
        extension: str | None = None,
    ) -> Path:
        """Serialize rows and atomically replace the artifact.

        The temporary file is created next to the artifact so that
        ``os.replace`` is an atomic rename. On any failure the temporary
        file is removed and the previous artifact, if any, is untouched.

        Args:
            key: The cache key
            rows: Row mappings to persist
            extension: Override the default extension

        Returns:
            Path of the written artifact

        Raises:
            CacheWriteError: If serialization or the write fails
        """
        path = self.path_for(key, extension)
        try:
            data = json.dumps(rows, default=str, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise CacheWriteError(f"Cannot serialize rows for {key!r}: {e}", key=key) from e

        tmp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=_TEMP_SUFFIX,
                delete=False,
                encoding="utf-8",
            ) as fd:
                tmp_path = fd.name
                fd.write(data)
                fd.flush()
                os.fsync(fd.fileno())
            os.replace(tmp_path, path)
        except (OSError, ValueError) as e:
            # ValueError covers UnicodeEncodeError from unencodable strings
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
            raise CacheWriteError(f"Cannot write artifact {path}: {e}", key=key) from e
        except BaseException:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
            raise

        return path

    def delete(self, key: str, extension: str | None = None) -> bool:
        """Delete one artifact.

        Args:
            key: The cache key
            extension: Override the default extension

        Returns:
            True if deleted, False if there was nothing to delete
        """
        path = self.path_for(key, extension)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def clear_all(self) -> int:
        """Delete every regular file directly inside the namespace.

        Subdirectories and their contents are left alone. A missing or
        empty namespace is a no-op.

        Returns:
            Number of files deleted
        """
        if not self._namespace.is_dir():
            return 0

        count = 0
        for path in self._namespace.iterdir():
            if not path.is_file():
                continue
            try:
                path.unlink()
                count += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Could not delete %s: %s", path, e)
        return count

    def count_all(self) -> int:
        """Count artifacts in the namespace, ignoring in-flight temporary files.

        Returns:
            Number of artifacts
        """
        if not self._namespace.is_dir():
            return 0
        return sum(
            1
            for path in self._namespace.iterdir()
            if path.is_file() and not (path.name.startswith(".") and path.name.endswith(_TEMP_SUFFIX))
        )

    def health_check(self) -> bool:
        """Check if the namespace is usable.

        Returns:
            True if the namespace exists (or could be created) and is writable
        """
        try:
            self.ensure_namespace()
            return True
        except NamespaceUnavailableError:
            return False
