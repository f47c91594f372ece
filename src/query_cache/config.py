import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from query_cache.entities import ConnectionConfig

load_dotenv()


def _optional_int(value: str | None) -> int | None:
    return int(value) if value else None


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Cache
    cache_namespace: str = os.getenv("QUERY_CACHE_NAMESPACE", "cache/")
    cache_extension: str = os.getenv("QUERY_CACHE_EXTENSION", ".json")
    cache_ttl: int = int(os.getenv("QUERY_CACHE_TTL", "1800"))  # 30 minutes default

    # Database (DATABASE_URL wins over the individual parts when set)
    database_url: str | None = os.getenv("DATABASE_URL")
    db_driver: str = os.getenv("DB_DRIVER", "mysql+pymysql")
    db_host: str | None = os.getenv("DB_HOST", "localhost")
    db_port: int | None = _optional_int(os.getenv("DB_PORT"))
    db_user: str | None = os.getenv("DB_USER")
    db_password: str | None = os.getenv("DB_PASSWORD")
    db_name: str | None = os.getenv("DB_NAME")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl < 0:
            raise ValueError(f"QUERY_CACHE_TTL must be >= 0, got {self.cache_ttl}")

        if not self.cache_extension.startswith("."):
            raise ValueError(
                f"QUERY_CACHE_EXTENSION must start with '.', got {self.cache_extension!r}"
            )

        if not self.cache_namespace:
            raise ValueError("QUERY_CACHE_NAMESPACE must not be empty")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_connection_config(source: Settings | None = None) -> ConnectionConfig:
    """Build a ConnectionConfig from settings."""
    source = source or settings
    return ConnectionConfig(
        host=source.db_host,
        user=source.db_user,
        password=source.db_password,
        database=source.db_name,
        port=source.db_port,
        driver=source.db_driver,
        url=source.database_url,
    )
