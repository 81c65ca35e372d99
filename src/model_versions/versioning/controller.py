"""Versioning lifecycle: automatic snapshots, manual snapshots, and restore."""

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar

from model_versions.config import VersioningConfig
from model_versions.db.queries import now_utc
from model_versions.models.rules import VersionableRuleSet
from model_versions.models.snapshot import Snapshot
from model_versions.store.allocator import VersionNumberAllocator
from model_versions.store.version_store import VersionStore
from model_versions.versioning.entity import EntityPersister, Versionable
from model_versions.versioning.filters import filter_versionable_attributes, has_versionable_change
from model_versions.versioning.gate import VersioningGate

logger = logging.getLogger(__name__)

T = TypeVar("T")

ActorAccessor = Callable[[], str | None]


class VersioningController:
    """Keeps an append-only version history for entities.

    The application's persistence layer calls ``on_created`` and
    ``on_updated`` right after it commits an entity. Everything the
    controller needs (store, config, rules, persister, current actor) is
    passed in explicitly.
    """

    def __init__(
        self,
        store: VersionStore,
        config: VersioningConfig | None = None,
        *,
        rules: Mapping[str, VersionableRuleSet] | None = None,
        persister: EntityPersister | None = None,
        actor: ActorAccessor | None = None,
        gate: VersioningGate | None = None,
        allocator: VersionNumberAllocator | None = None,
    ) -> None:
        """Initialize with a version store and optional collaborators.

        Raises ValueError if the store writes to a different table than
        ``config.table_name``. Without a config, the store's table is used.
        """
        if config is None:
            config = VersioningConfig(table_name=store.table_name)
        elif store.table_name != config.table_name:
            raise ValueError(
                f"VersionStore uses table {store.table_name!r} "
                f"but the config names {config.table_name!r}"
            )
        self.store = store
        self.config = config
        self.rules = dict(rules or {})
        self.persister = persister
        self.actor = actor
        self.gate = gate or VersioningGate()
        self.allocator = allocator or VersionNumberAllocator(
            store, max_attempts=self.config.max_attempts
        )

    def rules_for(self, entity_type: str) -> VersionableRuleSet:
        """Rule set for an entity type, falling back to the configured defaults."""
        rule_set = self.rules.get(entity_type)
        if rule_set is None:
            rule_set = VersionableRuleSet(default_excluded=self.config.default_non_versionable)
        return rule_set

    # -- Lifecycle hooks --

    async def on_created(self, entity: Versionable) -> Snapshot | None:
        """Record the first version of a newly created entity."""
        if not self.config.auto_version_on_create or self.gate.is_suppressed(entity):
            return None
        return await self.create_version(entity)

    async def on_updated(
        self, entity: Versionable, changed_fields: Iterable[str]
    ) -> Snapshot | None:
        """Record a new version if a versionable field changed."""
        if not self.config.auto_version_on_update or self.gate.is_suppressed(entity):
            return None
        if not self.has_versionable_changes(entity, changed_fields):
            return None
        return await self.create_version(entity)

    # -- Manual operations --

    async def create_version(self, entity: Versionable, comment: str | None = None) -> Snapshot:
        """Append a snapshot of the entity's current versionable state.

        Runs regardless of configuration toggles and suppression.
        """
        entity_type = entity.entity_type
        entity_id = entity.entity_id
        data = filter_versionable_attributes(entity.get_fields(), self.rules_for(entity_type))
        created_by = self.actor() if self.actor is not None else None

        def build(version_number: int) -> Snapshot:
            return Snapshot(
                entity_type=entity_type,
                entity_id=entity_id,
                version_number=version_number,
                data=data,
                created_by=created_by,
                comment=comment,
                created_at=now_utc(),
            )

        snapshot = await self.allocator.allocate(entity_type, entity_id, build)
        logger.info("Created version %d of %s:%s", snapshot.version_number, entity_type, entity_id)
        return snapshot

    async def restore_to_version(
        self, entity: Versionable, version_number: int, comment: str | None = None
    ) -> bool:
        """Restore an entity's versionable fields to a stored version.

        Returns False, changing nothing, if the version does not exist.
        Fields missing from the stored payload keep their live values.
        """
        version = await self.get_version(entity, version_number)
        if version is None:
            logger.info(
                "Version %d of %s:%s not found, nothing restored",
                version_number,
                entity.entity_type,
                entity.entity_id,
            )
            return False

        async def apply() -> None:
            entity.set_fields(dict(version.data))
            if self.persister is not None:
                await self.persister.save(entity)

        await self.gate.with_suppressed(entity, apply)
        logger.info(
            "Restored %s:%s to version %d", entity.entity_type, entity.entity_id, version_number
        )

        if self.config.create_version_on_restore:
            if comment is None:
                comment = f"Restored to version {version_number}"
            await self.create_version(entity, comment)
        return True

    async def with_suppressed(self, entity: Versionable, action: Callable[[], Awaitable[T]]) -> T:
        """Await ``action()`` without automatic versioning for ``entity``."""
        return await self.gate.with_suppressed(entity, action)

    def has_versionable_changes(self, entity: Versionable, changed_fields: Iterable[str]) -> bool:
        """True if any changed field would be captured in a snapshot."""
        return has_versionable_change(changed_fields, self.rules_for(entity.entity_type))

    # -- Read helpers --

    async def versions(self, entity: Versionable) -> list[Snapshot]:
        """All versions of an entity, newest first."""
        return await self.store.list_descending(entity.entity_type, entity.entity_id)

    async def get_version(self, entity: Versionable, version_number: int) -> Snapshot | None:
        """A specific version of an entity, or None."""
        return await self.store.get(entity.entity_type, entity.entity_id, version_number)

    async def get_current_version(self, entity: Versionable) -> Snapshot | None:
        """The latest version of an entity, or None."""
        return await self.store.current(entity.entity_type, entity.entity_id)

    async def get_current_version_number(self, entity: Versionable) -> int:
        """The latest version number, 0 when there is no history."""
        current = await self.get_current_version(entity)
        return current.version_number if current else 0

    async def get_version_data(
        self, entity: Versionable, version_number: int
    ) -> dict[str, Any] | None:
        """The stored payload of a version, or None."""
        version = await self.get_version(entity, version_number)
        return dict(version.data) if version else None
