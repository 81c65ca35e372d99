"""Tests for versions table DDL."""

import pytest

from model_versions.db.schema import apply_schema, drop_schema, validate_table_name


@pytest.mark.parametrize("name", ["versions", "model_versions", "_history2"])
def test_valid_table_names(name):
    assert validate_table_name(name) == name


@pytest.mark.parametrize("name", ["", "1versions", "versions; DROP TABLE x", "my-table", "a.b"])
def test_invalid_table_names(name):
    with pytest.raises(ValueError, match="Invalid versions table name"):
        validate_table_name(name)


@pytest.mark.asyncio
async def test_apply_schema_is_idempotent(db):
    await apply_schema(db, table_name="versions")
    await apply_schema(db, table_name="versions")
    cursor = await db.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name='versions'"
    )
    row = await cursor.fetchone()
    assert row[0] == 1


@pytest.mark.asyncio
async def test_apply_schema_custom_table(db):
    await apply_schema(db, table_name="audit_versions")
    cursor = await db.execute("PRAGMA index_list(audit_versions)")
    indexes = {row[1] for row in await cursor.fetchall()}
    assert "idx_audit_versions_versionable" in indexes
    assert "idx_audit_versions_created_by" in indexes


@pytest.mark.asyncio
async def test_drop_schema(db):
    await drop_schema(db, table_name="versions")
    cursor = await db.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='versions'"
    )
    assert await cursor.fetchone() is None
