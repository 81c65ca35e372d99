"""Tests for version store."""

from datetime import UTC, datetime

import pytest

from model_versions.errors import VersionConflictError
from model_versions.models.snapshot import Snapshot
from model_versions.store.version_store import VersionStore


def _snapshot(number: int, entity_id: str = "1", **data) -> Snapshot:
    return Snapshot(
        entity_type="article",
        entity_id=entity_id,
        version_number=number,
        data=data or {"name": f"v{number}"},
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
    )


@pytest.mark.asyncio
async def test_append_and_get(version_store):
    stored = await version_store.append(_snapshot(1, name="First", tags=["a", "b"]))
    assert stored.version_number == 1

    fetched = await version_store.get("article", "1", 1)
    assert fetched is not None
    assert fetched.data == {"name": "First", "tags": ["a", "b"]}
    assert fetched.created_at == datetime(2024, 1, 1, tzinfo=UTC)
    assert fetched.created_by is None
    assert fetched.comment is None


@pytest.mark.asyncio
async def test_get_missing_version(version_store):
    await version_store.append(_snapshot(1))
    assert await version_store.get("article", "1", 999) is None
    assert await version_store.get("article", "2", 1) is None


@pytest.mark.asyncio
async def test_current_is_highest_version(version_store):
    for n in (1, 2, 3):
        await version_store.append(_snapshot(n))
    current = await version_store.current("article", "1")
    assert current is not None
    assert current.version_number == 3
    assert current.data == {"name": "v3"}


@pytest.mark.asyncio
async def test_current_without_history(version_store):
    assert await version_store.current("article", "1") is None
    assert await version_store.max_version_number("article", "1") == 0


@pytest.mark.asyncio
async def test_list_descending(version_store):
    for n in range(1, 6):
        await version_store.append(_snapshot(n))
    versions = await version_store.list_descending("article", "1")
    assert [v.version_number for v in versions] == [5, 4, 3, 2, 1]


@pytest.mark.asyncio
async def test_list_ascending(version_store):
    for n in (1, 2, 3):
        await version_store.append(_snapshot(n))
    versions = await version_store.list_ascending("article", "1")
    assert [v.version_number for v in versions] == [1, 2, 3]


@pytest.mark.asyncio
async def test_histories_are_per_entity(version_store):
    await version_store.append(_snapshot(1, entity_id="1"))
    await version_store.append(_snapshot(2, entity_id="1"))
    await version_store.append(_snapshot(1, entity_id="2"))
    assert await version_store.count("article", "1") == 2
    assert await version_store.count("article", "2") == 1
    assert await version_store.max_version_number("article", "2") == 1


@pytest.mark.asyncio
async def test_duplicate_append_raises_conflict(version_store):
    await version_store.append(_snapshot(1, name="original"))
    with pytest.raises(VersionConflictError) as exc_info:
        await version_store.append(_snapshot(1, name="duplicate"))
    assert exc_info.value.version_number == 1
    assert exc_info.value.entity_id == "1"

    kept = await version_store.get("article", "1", 1)
    assert kept is not None
    assert kept.data == {"name": "original"}
    assert await version_store.count("article", "1") == 1


@pytest.mark.asyncio
async def test_custom_table(db):
    from model_versions.db.schema import apply_schema

    await apply_schema(db, table_name="article_history")
    store = VersionStore(db, table_name="article_history")
    await store.append(_snapshot(1))
    assert await store.count("article", "1") == 1
    cursor = await db.execute("SELECT COUNT(*) FROM versions")
    row = await cursor.fetchone()
    assert row[0] == 0


def test_invalid_table_name():
    with pytest.raises(ValueError):
        VersionStore(None, table_name="versions; --")
