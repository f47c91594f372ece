"""SQLAlchemy implementation of QuerySource.

Runs raw query text against any database SQLAlchemy can reach. The
default driver is MySQL through PyMySQL; SQLite works out of the box.
"""

import logging
import threading
from typing import Any

from sqlalchemy import Connection, Engine, create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError

from query_cache.config import get_connection_config
from query_cache.entities import ConnectionConfig
from query_cache.exceptions import QueryExecutionError

logger = logging.getLogger(__name__)


def build_url(config: ConnectionConfig) -> str | URL:
    """Build the SQLAlchemy URL for a connection config."""
    if config.url:
        return config.url
    return URL.create(
        drivername=config.driver,
        username=config.user,
        password=config.password,
        host=config.host,
        port=config.port,
        database=config.database,
    )


class SqlAlchemyQuerySource:
    """SQLAlchemy implementation of the QuerySource protocol.

    The engine and a single connection are created lazily on the first
    run and reused afterwards. Every run is committed, so each call sees
    current data the way an autocommit driver would.

    Access to the connection is serialized with a lock, which makes one
    instance safe to share between threads.
    """

    def __init__(self, config: ConnectionConfig | None = None) -> None:
        """Initialize the query source.

        Args:
            config: Connection parameters. If None, built from settings.
        """
        self._config = config or get_connection_config()
        self._engine: Engine | None = None
        self._connection: Connection | None = None
        self._lock = threading.RLock()

    @classmethod
    def create(cls, config: ConnectionConfig | None = None) -> "SqlAlchemyQuerySource":
        """Factory method to create SqlAlchemyQuerySource with defaults.

        Args:
            config: Connection parameters. If None, uses settings.

        Returns:
            Configured SqlAlchemyQuerySource
        """
        return cls(config=config)

    @property
    def config(self) -> ConnectionConfig:
        """Get the connection config."""
        return self._config

    @property
    def is_connected(self) -> bool:
        """Whether a connection is currently open."""
        return self._connection is not None

    def _connect(self) -> Connection:
        """Open the engine and connection on first use."""
        if self._connection is not None:
            return self._connection

        try:
            if self._engine is None:
                self._engine = create_engine(build_url(self._config))
            self._connection = self._engine.connect()
        except (SQLAlchemyError, ImportError) as e:
            # ImportError: the driver for config.driver is not installed
            raise QueryExecutionError(f"Cannot connect to database: {e}") from e

        logger.info("Database connection opened: %s", self._engine.url.render_as_string())
        return self._connection

    def run(self, query: str) -> list[dict[str, Any]]:
        """Execute a query and return its rows.

        Args:
            query: Query text, passed through verbatim

        Returns:
            Ordered list of row mappings; empty for statements without rows

        Raises:
            QueryExecutionError: On connection or syntax failure
        """
        with self._lock:
            connection = self._connect()
            try:
                result = connection.execute(text(query))
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
                connection.commit()
            except SQLAlchemyError as e:
                self._rollback(connection)
                raise QueryExecutionError(f"Query failed: {e}", query=query) from e
            return rows

    def _rollback(self, connection: Connection) -> None:
        try:
            connection.rollback()
        except SQLAlchemyError as e:
            # Connection is unusable; drop it so the next run reconnects
            logger.warning("Rollback failed, discarding connection: %s", e)
            try:
                connection.invalidate()
            except SQLAlchemyError as invalidate_error:
                logger.debug("Invalidate after failed rollback failed: %s", invalidate_error)
            self._connection = None

    def health_check(self) -> bool:
        """Check if the database is reachable.

        Returns:
            True if healthy, False otherwise
        """
        try:
            self.run("SELECT 1")
            return True
        except QueryExecutionError:
            return False

    def close(self) -> None:
        """Close the connection and dispose of the engine."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
                logger.info("Database connection closed")

    def __enter__(self) -> "SqlAlchemyQuerySource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
