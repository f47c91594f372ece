"""Domain entities for internal representation.

These are pure frozen dataclasses used by the service and the
repositories. They carry no serialization or validation logic and
have no external dependencies.
"""

from .cache_entry import CacheEntryEntity
from .connection_config import ConnectionConfig

__all__ = ["CacheEntryEntity", "ConnectionConfig"]
