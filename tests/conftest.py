"""Shared test fixtures."""

import json

import pytest_asyncio
from pydantic import BaseModel, Field

from model_versions.config import VersioningConfig
from model_versions.db.connection import create_connection
from model_versions.store.version_store import VersionStore
from model_versions.versioning.controller import VersioningController
from model_versions.versioning.entity import ModelEntity


class Article(BaseModel):
    """Test entity with a mix of versionable and default-excluded fields."""

    id: int | None = None
    name: str
    description: str | None = None
    data: dict[str, object] = Field(default_factory=dict)
    is_active: bool = True
    created_at: str | None = None
    updated_at: str | None = None


class ArticleRepository:
    """Persists articles to their own table and fires the versioning hooks.

    Mirrors how an application's persistence layer would drive the
    controller: hooks are called only after the row is committed.
    """

    def __init__(self, db, controller: VersioningController | None = None):
        self.db = db
        self.controller = controller
        self.save_count = 0

    async def setup(self) -> None:
        await self.db.execute(
            "CREATE TABLE IF NOT EXISTS test_articles (id INTEGER PRIMARY KEY, body TEXT NOT NULL)"
        )
        await self.db.commit()

    async def create(self, **fields) -> ModelEntity:
        cursor = await self.db.execute(
            "SELECT COALESCE(MAX(id), 0) + 1 AS next_id FROM test_articles"
        )
        row = await cursor.fetchone()
        article = Article(id=row["next_id"], created_at="2024-01-01T00:00:00", **fields)
        await self.db.execute(
            "INSERT INTO test_articles (id, body) VALUES (?, ?)",
            (article.id, article.model_dump_json()),
        )
        await self.db.commit()
        entity = ModelEntity(article)
        if self.controller is not None:
            await self.controller.on_created(entity)
        return entity

    async def update(self, entity: ModelEntity, **changes) -> None:
        for name, value in changes.items():
            setattr(entity.model, name, value)
        await self.save(entity)

    async def save(self, entity: ModelEntity) -> None:
        """Write the entity back and report which fields changed."""
        stored = await self.load(entity.model.id)
        entity.model.updated_at = f"2024-01-01T00:00:{self.save_count:02d}"
        current = entity.get_fields()
        previous = stored.model_dump(mode="json") if stored else {}
        changed = [name for name, value in current.items() if previous.get(name) != value]
        await self.db.execute(
            "UPDATE test_articles SET body = ? WHERE id = ?",
            (json.dumps(current), entity.model.id),
        )
        await self.db.commit()
        self.save_count += 1
        if self.controller is not None:
            await self.controller.on_updated(entity, changed)

    async def load(self, article_id: int) -> Article | None:
        cursor = await self.db.execute("SELECT body FROM test_articles WHERE id = ?", (article_id,))
        row = await cursor.fetchone()
        return Article.model_validate_json(row["body"]) if row else None


@pytest_asyncio.fixture
async def db():
    """In-memory database with the versions schema."""
    conn = await create_connection(":memory:", table_name="versions")
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def version_store(db):
    """Version store backed by in-memory DB."""
    return VersionStore(db)


@pytest_asyncio.fixture
async def make_controller(db, version_store):
    """Factory for a controller wired to an article repository.

    Returns (controller, repository); keyword arguments override
    VersioningConfig fields, ``rules``/``actor`` go to the controller.
    """

    async def _make(*, rules=None, actor=None, **config_overrides):
        repo = ArticleRepository(db)
        await repo.setup()
        controller = VersioningController(
            version_store,
            VersioningConfig(**config_overrides),
            rules=rules,
            persister=repo,
            actor=actor,
        )
        repo.controller = controller
        return controller, repo

    return _make


@pytest_asyncio.fixture
async def versioned(make_controller):
    """Controller and repository with default configuration."""
    return await make_controller()
