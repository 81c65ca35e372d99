"""Capabilities an entity needs in order to be versioned."""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Versionable(Protocol):
    """An entity with a stable identity and a readable/writable field map."""

    @property
    def entity_type(self) -> str:
        """Name of the entity's type, e.g. ``"article"``."""
        ...

    @property
    def entity_id(self) -> str:
        """Identifier of the entity within its type."""
        ...

    def get_fields(self) -> dict[str, Any]:
        """Current field values by name."""
        ...

    def set_fields(self, values: Mapping[str, Any]) -> None:
        """Overwrite the given fields on the live entity."""
        ...


@runtime_checkable
class EntityPersister(Protocol):
    """Writes an entity's current state back to the application's storage."""

    async def save(self, entity: Versionable) -> None:
        """Persist the entity."""
        ...


class ModelEntity:
    """Adapts a pydantic model with an ``id`` field to the Versionable protocol.

    Fields are read with ``model_dump(mode="json")`` so that snapshot
    payloads are JSON-serializable. The model must allow assignment
    (pydantic models do unless ``frozen=True``).
    """

    def __init__(self, model: BaseModel, entity_type: str | None = None) -> None:
        """Wrap a model; the type name defaults to the lowercased class name."""
        self.model = model
        self._entity_type = entity_type or type(model).__name__.lower()

    @property
    def entity_type(self) -> str:
        """Name of the wrapped model's type."""
        return self._entity_type

    @property
    def entity_id(self) -> str:
        """The wrapped model's ``id``, as a string."""
        model_id = getattr(self.model, "id", None)
        if model_id is None:
            raise ValueError(f"{type(self.model).__name__} has no id yet")
        return str(model_id)

    def get_fields(self) -> dict[str, Any]:
        """Current field values of the wrapped model."""
        return self.model.model_dump(mode="json")

    def set_fields(self, values: Mapping[str, Any]) -> None:
        """Assign values to the wrapped model, ignoring unknown fields.

        Each value is validated against its field, so JSON-mode payload
        values (ISO strings, lists) come back as the declared types
        (``datetime``, ``UUID``, nested models). Raises
        ``pydantic.ValidationError`` if a value no longer fits its field.
        """
        known = type(self.model).model_fields
        validator = self.model.__pydantic_validator__
        for name, value in values.items():
            if name in known:
                validator.validate_assignment(self.model, name, value)
