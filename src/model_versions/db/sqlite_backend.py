"""Version history storage on SQLite via aiosqlite.

Queries are already written in SQLite syntax, so statements pass straight
through. A UNIQUE failure on the versions table becomes
``UniqueViolationError``; CHECK and NOT NULL failures propagate as
``sqlite3.IntegrityError``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING, Any

from model_versions.db.backend import UniqueViolationError

if TYPE_CHECKING:
    import aiosqlite

    from model_versions.db.backend import Cursor, Row

logger = logging.getLogger(__name__)


def _is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    """True if the IntegrityError came from a UNIQUE or PRIMARY KEY constraint."""
    message = str(exc)
    return message.startswith("UNIQUE constraint failed") or message.startswith(
        "PRIMARY KEY constraint failed"
    )


class SQLiteCursor:
    """Wraps aiosqlite.Cursor to satisfy the Cursor protocol."""

    def __init__(self, cursor: aiosqlite.Cursor) -> None:
        """Initialize with an aiosqlite cursor."""
        self._cursor = cursor

    @property
    def rowcount(self) -> int:
        """Number of rows affected by the last operation."""
        rc = self._cursor.rowcount
        return rc if rc is not None else -1

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        return await self._cursor.fetchone()

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        return list(await self._cursor.fetchall())


class SQLiteBackend:
    """SQLite implementation of the Database protocol.

    Passes all calls through to one aiosqlite.Connection. Concurrent
    coroutines share that connection, so a snapshot insert can interleave
    between another caller's max read and its insert.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        """Initialize with an aiosqlite connection."""
        self._conn = conn

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single SQL statement and return a cursor."""
        try:
            cursor = await self._conn.execute(sql, params)
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise UniqueViolationError(str(exc)) from exc
            raise
        return SQLiteCursor(cursor)

    async def executemany(self, sql: str, params_seq: list[tuple[Any, ...] | list[Any]]) -> None:
        """Execute a SQL statement for each set of parameters."""
        try:
            await self._conn.executemany(sql, params_seq)
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise UniqueViolationError(str(exc)) from exc
            raise

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements (versions DDL)."""
        await self._conn.executescript(sql)

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        await self._conn.close()

    # -- Schema --

    async def apply_schema(self, *, table_name: str = "versions") -> None:
        """Create the versions table named ``table_name``."""
        from model_versions.db.schema import apply_schema

        await apply_schema(self, table_name=table_name)
