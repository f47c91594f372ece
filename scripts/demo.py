#!/usr/bin/env python3
"""
Demo script for the query cache.

This script seeds a throwaway SQLite database, then walks through cache
misses, hits, expiry and clearing. Point DATABASE_URL at a real server
(and drop --sqlite) to run the same walkthrough against it.
"""

import argparse
import logging
import tempfile
import time
from pathlib import Path

from sqlalchemy import create_engine, text

from query_cache import ConnectionConfig, EntryCache, QueryExecutionError, get_connection_config


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def seed_sqlite(path: Path) -> ConnectionConfig:
    """Create the `test` table used throughout the demo."""
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE IF NOT EXISTS test (id TEXT PRIMARY KEY, name TEXT)"))
        conn.execute(text("DELETE FROM test"))
        conn.execute(text("INSERT INTO test (id, name) VALUES ('1', 'alpha'), ('2', 'beta')"))
    engine.dispose()
    return ConnectionConfig(driver="sqlite", host=None, database=str(path))


def timed_fetch(cache: EntryCache, query: str, key: str, ttl: int | None = None) -> None:
    """Fetch once and report where the rows came from."""
    hits_before = cache.metrics.cache_hits
    start = time.time()
    rows = cache.fetch(query, key, ttl=ttl)
    duration = (time.time() - start) * 1000
    label = "HIT " if cache.metrics.cache_hits > hits_before else "MISS"
    print(f"  {label} {key:<8} {duration:7.2f}ms  {rows}")


def demo_basic_cache(cache: EntryCache) -> None:
    """Demonstrate miss-then-hit."""
    print_section("Miss, then hit")

    timed_fetch(cache, "SELECT * FROM test WHERE id = '1'", "test1")
    timed_fetch(cache, "SELECT * FROM test WHERE id = '2'", "test2")
    timed_fetch(cache, "SELECT * FROM test WHERE id = '1'", "test1")
    timed_fetch(cache, "SELECT * FROM test WHERE id = '2'", "test2")

    print(f"\n  Artifacts in {cache.store.namespace}:")
    for path in sorted(cache.store.namespace.iterdir()):
        print(f"    {path.name}: {path.read_text()}")


def demo_expiry(cache: EntryCache) -> None:
    """Demonstrate TTL handling."""
    print_section("Expiry")

    print("\n  ttl=0 always refreshes:")
    timed_fetch(cache, "SELECT * FROM test WHERE id = '1'", "test1", ttl=0)
    timed_fetch(cache, "SELECT * FROM test WHERE id = '1'", "test1", ttl=0)

    print("\n  ttl=1, fetched again after 1.5s:")
    timed_fetch(cache, "SELECT * FROM test WHERE id = '2'", "test2", ttl=1)
    time.sleep(1.5)
    timed_fetch(cache, "SELECT * FROM test WHERE id = '2'", "test2", ttl=1)


def demo_clear(cache: EntryCache) -> None:
    """Demonstrate invalidation and clearing."""
    print_section("Invalidate and clear")

    print(f"\n  invalidate('test1') -> {cache.invalidate('test1')}")
    timed_fetch(cache, "SELECT * FROM test WHERE id = '1'", "test1")

    print(f"\n  clear_all() removed {cache.clear_all()} file(s)")
    print(f"  clear_all() again removed {cache.clear_all()} file(s)")
    timed_fetch(cache, "SELECT * FROM test WHERE id = '2'", "test2")


def main() -> None:
    """Run all demos."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--sqlite", action="store_true", default=True, help="use a temporary SQLite database")
    parser.add_argument("--live", dest="sqlite", action="store_false", help="use DATABASE_URL / DB_* settings")
    parser.add_argument("--verbose", action="store_true", help="show debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    print("\nQuery Cache Demo")
    print("=" * 70)

    with tempfile.TemporaryDirectory() as workdir:
        workdir_path = Path(workdir)
        config = seed_sqlite(workdir_path / "dbcache.sqlite") if args.sqlite else get_connection_config()

        try:
            with EntryCache.create(connection=config, namespace=workdir_path / "cache") as cache:
                demo_basic_cache(cache)
                demo_expiry(cache)
                demo_clear(cache)

                print_section("Stats")
                for name, value in cache.get_stats().model_dump().items():
                    print(f"  {name}: {value}")

            print("\n" + "=" * 70)
            print("Demo completed successfully!")
            print("=" * 70)

        except QueryExecutionError as e:
            print(f"\nError: {e}")
            print("\nCheck DATABASE_URL or the DB_HOST / DB_USER / DB_PASSWORD / DB_NAME settings.")


if __name__ == "__main__":
    main()
