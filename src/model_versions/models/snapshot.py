"""Snapshot models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Snapshot(BaseModel):
    """An immutable, versioned capture of an entity's versionable fields."""

    model_config = ConfigDict(frozen=True)

    entity_type: str
    entity_id: str
    version_number: int = Field(ge=1)
    data: dict[str, Any] = Field(default_factory=dict)
    created_by: str | None = None
    comment: str | None = None
    created_at: datetime
