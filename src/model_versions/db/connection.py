"""Database connection management."""

import logging
from pathlib import Path

import aiosqlite

from model_versions.config import get_database_url, get_db_path, get_table_name
from model_versions.db.backend import Database
from model_versions.db.sqlite_backend import SQLiteBackend

logger = logging.getLogger(__name__)


async def create_connection(
    db_path: Path | str | None = None, *, table_name: str | None = None
) -> Database:
    """Create and initialize a database connection.

    Dispatches to SQLite or PostgreSQL based on MODEL_VERSIONS_DATABASE_URL.
    For in-memory SQLite databases, pass ":memory:".
    """
    table_name = table_name or get_table_name()
    # Explicit ":memory:" always uses SQLite (used by tests)
    if db_path == ":memory:":
        return await _create_sqlite(":memory:", table_name=table_name)
    url = get_database_url()
    if url and url.startswith("postgresql"):
        return await _create_postgres(url, table_name=table_name)
    return await _create_sqlite(db_path or get_db_path(), table_name=table_name)


async def _create_sqlite(db_path: Path | str, *, table_name: str) -> Database:
    """Create a SQLite backend and apply the versions schema."""
    db_path = str(db_path)

    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row

    # Enable WAL mode for better concurrent read performance
    await conn.execute("PRAGMA journal_mode=WAL")

    db = SQLiteBackend(conn)
    await db.apply_schema(table_name=table_name)
    logger.debug("SQLite database ready at %s", db_path)

    return db


async def _create_postgres(url: str, *, table_name: str) -> Database:
    """Create a PostgreSQL backend and apply the versions schema."""
    from model_versions.db.postgres_backend import PostgresBackend

    db = await PostgresBackend.create(url)
    await db.apply_schema(table_name=table_name)
    return db
