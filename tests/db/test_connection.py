"""Tests for database connection and schema initialization."""

import pytest

from model_versions.db.connection import create_connection


@pytest.mark.asyncio
async def test_create_in_memory_connection():
    db = await create_connection(":memory:", table_name="versions")
    try:
        cursor = await db.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
        tables = {row[0] for row in await cursor.fetchall()}
        assert "versions" in tables
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_versions_table_columns():
    db = await create_connection(":memory:", table_name="versions")
    try:
        cursor = await db.execute("PRAGMA table_info(versions)")
        columns = {row[1] for row in await cursor.fetchall()}
        assert columns == {
            "id",
            "versionable_type",
            "versionable_id",
            "version_number",
            "data",
            "created_by",
            "comment",
            "created_at",
        }
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_table_name_from_environment(monkeypatch):
    monkeypatch.setenv("MODEL_VERSIONS_TABLE", "model_history")
    db = await create_connection(":memory:")
    try:
        cursor = await db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='model_history'"
        )
        assert await cursor.fetchone() is not None
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_file_database_creates_parent_dir(tmp_path):
    db_path = tmp_path / "nested" / "versions.db"
    db = await create_connection(db_path, table_name="versions")
    try:
        assert db_path.exists()
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_only_versions_table_is_created():
    db = await create_connection(":memory:", table_name="versions")
    try:
        cursor = await db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
        )
        assert [row[0] for row in await cursor.fetchall()] == ["versions"]
    finally:
        await db.close()


@pytest.mark.asyncio
async def test_sqlite_pragmas():
    db = await create_connection(":memory:", table_name="versions")
    try:
        cursor = await db.execute("PRAGMA foreign_keys")
        row = await cursor.fetchone()
        assert row[0] == 0
    finally:
        await db.close()
