"""Per-instance suppression of automatic versioning."""

from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from model_versions.versioning.entity import ModelEntity

T = TypeVar("T")


def _instance_key(entity: object) -> int:
    # Separate ModelEntity wrappers around one model share its suppression
    if isinstance(entity, ModelEntity):
        return id(entity.model)
    return id(entity)


class VersioningGate:
    """Tracks which entity instances currently have auto-versioning disabled.

    Suppression is keyed by object identity, not by entity id, so two
    in-memory instances of the same record are independent. Regions nest:
    an instance stays suppressed until its outermost region exits.
    """

    def __init__(self) -> None:
        """Start with nothing suppressed."""
        self._depth: dict[int, int] = {}

    def is_suppressed(self, entity: object) -> bool:
        """True while ``entity`` is inside a suppressed region."""
        return self._depth.get(_instance_key(entity), 0) > 0

    @contextmanager
    def suppressed(self, entity: object) -> Iterator[None]:
        """Disable automatic versioning for ``entity`` within the block."""
        key = _instance_key(entity)
        self._depth[key] = self._depth.get(key, 0) + 1
        try:
            yield
        finally:
            remaining = self._depth[key] - 1
            if remaining:
                self._depth[key] = remaining
            else:
                del self._depth[key]

    async def with_suppressed(self, entity: object, action: Callable[[], Awaitable[T]]) -> T:
        """Await ``action()`` with automatic versioning disabled for ``entity``."""
        with self.suppressed(entity):
            return await action()
