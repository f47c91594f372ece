"""Connection configuration entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConnectionConfig:
    """Backing-store connection parameters for one cache instance.

    Each EntryCache owns its own config; nothing is shared between
    instances unless the caller passes the same QuerySource explicitly.

    Attributes:
        host: Database host name or IP address
        user: Database user
        password: Database password (hidden from repr)
        database: Database (schema) name; the file path for SQLite
        port: Optional port, driver default when None
        driver: SQLAlchemy driver name (e.g. "mysql+pymysql", "sqlite")
        url: Full SQLAlchemy URL; overrides every other field when set
    """

    host: str | None = "localhost"
    user: str | None = None
    password: str | None = field(default=None, repr=False)
    database: str | None = None
    port: int | None = None
    driver: str = "mysql+pymysql"
    url: str | None = field(default=None, repr=False)

    @classmethod
    def from_url(cls, url: str) -> "ConnectionConfig":
        """Alternative constructor for a ready-made SQLAlchemy URL."""
        return cls(host=None, url=url)
