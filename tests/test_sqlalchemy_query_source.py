"""
Tests for the SQLAlchemy query source, run against a file-backed SQLite database.
"""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from query_cache import ConnectionConfig, EntryCache, QueryExecutionError
from query_cache.repositories import SqlAlchemyQuerySource, build_url


@pytest.fixture
def db_path(tmp_path):
    """A SQLite database with a small `test` table."""
    path = tmp_path / "dbcache.sqlite"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE test (id TEXT PRIMARY KEY, name TEXT)"))
        conn.execute(text("INSERT INTO test (id, name) VALUES ('1', 'a'), ('2', 'b')"))
    engine.dispose()
    return path


@pytest.fixture
def sqlite_config(db_path):
    return ConnectionConfig(driver="sqlite", host=None, database=str(db_path))


@pytest.fixture
def query_source(sqlite_config):
    with SqlAlchemyQuerySource(sqlite_config) as source:
        yield source


def _insert(db_path, row_id, name):
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO test (id, name) VALUES (:id, :name)"), {"id": row_id, "name": name})
    engine.dispose()


def test_build_url_from_parts():
    """Connection parts become a SQLAlchemy URL."""
    config = ConnectionConfig(host="db.local", user="app", password="secret", database="shop", port=3306)
    url = build_url(config)

    assert url.drivername == "mysql+pymysql"
    assert url.host == "db.local"
    assert url.username == "app"
    assert url.password == "secret"
    assert url.database == "shop"
    assert url.port == 3306


def test_build_url_override():
    """A full URL wins over the individual parts."""
    config = ConnectionConfig.from_url("sqlite:///:memory:")
    assert build_url(config) == "sqlite:///:memory:"


def test_password_hidden_from_repr():
    config = ConnectionConfig(user="app", password="secret")
    assert "secret" not in repr(config)


def test_run_returns_row_mappings(query_source):
    """Rows come back as ordered column-name mappings."""
    rows = query_source.run("SELECT id, name FROM test ORDER BY id")
    assert rows == [{"id": "1", "name": "a"}, {"id": "2", "name": "b"}]


def test_run_no_match_returns_empty(query_source):
    assert query_source.run("SELECT * FROM test WHERE id = '99'") == []


def test_connects_lazily_and_reuses(query_source):
    """No connection is opened until the first run, then it is reused."""
    assert query_source.is_connected is False

    query_source.run("SELECT 1")
    first = query_source._connection
    query_source.run("SELECT 1")

    assert query_source.is_connected is True
    assert query_source._connection is first


def test_statement_without_rows_is_committed(query_source, db_path):
    """Writes return no rows and are visible to other connections."""
    assert query_source.run("INSERT INTO test (id, name) VALUES ('3', 'c')") == []

    engine = create_engine(f"sqlite:///{db_path}")
    with engine.connect() as conn:
        count = conn.execute(text("SELECT COUNT(*) FROM test")).scalar()
    engine.dispose()
    assert count == 3


def test_sees_external_changes(query_source, db_path):
    """Each run sees data committed elsewhere since the previous run."""
    assert len(query_source.run("SELECT * FROM test")) == 2
    _insert(db_path, "3", "c")
    assert len(query_source.run("SELECT * FROM test")) == 3


def test_syntax_error_raises(query_source):
    """Malformed queries become QueryExecutionError carrying the query."""
    with pytest.raises(QueryExecutionError) as exc_info:
        query_source.run("SELEC nonsense")
    assert exc_info.value.query == "SELEC nonsense"
    assert exc_info.value.__cause__ is not None


def test_usable_after_error(query_source):
    """A failed query does not poison the connection."""
    with pytest.raises(QueryExecutionError):
        query_source.run("SELECT * FROM missing_table")
    assert query_source.run("SELECT COUNT(*) AS n FROM test") == [{"n": 2}]


def test_failed_rollback_discards_connection(query_source, monkeypatch):
    """A connection that cannot roll back is invalidated and replaced."""
    query_source.run("SELECT 1")
    broken = query_source._connection

    def broken_rollback():
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(broken, "rollback", broken_rollback)

    with pytest.raises(QueryExecutionError):
        query_source.run("SELECT * FROM missing_table")

    assert not query_source.is_connected
    assert broken.invalidated
    assert query_source.run("SELECT COUNT(*) AS n FROM test") == [{"n": 2}]


def test_connection_failure_raises(tmp_path):
    """An unreachable database is a QueryExecutionError."""
    config = ConnectionConfig(driver="sqlite", host=None, database=str(tmp_path / "no" / "such" / "db"))
    with SqlAlchemyQuerySource(config) as source:
        with pytest.raises(QueryExecutionError):
            source.run("SELECT 1")
        assert source.health_check() is False


def test_close_is_idempotent_and_reconnects(query_source):
    """close can be called twice and a later run reconnects."""
    query_source.run("SELECT 1")
    query_source.close()
    query_source.close()
    assert query_source.is_connected is False

    assert query_source.run("SELECT COUNT(*) AS n FROM test") == [{"n": 2}]


def test_health_check(query_source):
    assert query_source.health_check() is True


def test_entry_cache_end_to_end(sqlite_config, db_path, tmp_path):
    """A real database behind the cache: hits until the TTL forces a refresh."""
    namespace = tmp_path / "cache"
    query = "SELECT * FROM test ORDER BY id"

    with EntryCache.create(connection=sqlite_config, namespace=namespace) as cache:
        first = cache.fetch(query, "all_rows")
        _insert(db_path, "3", "c")

        cached = cache.fetch(query, "all_rows", ttl=1800)
        refreshed = cache.fetch(query, "all_rows", ttl=0)

        assert cache.is_healthy() is True

    assert first == [{"id": "1", "name": "a"}, {"id": "2", "name": "b"}]
    assert cached == first
    assert refreshed[-1] == {"id": "3", "name": "c"}
    assert (namespace / "all_rows.json").is_file()
