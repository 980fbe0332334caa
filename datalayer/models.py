from __future__ import annotations

# datalayer/models.py
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class ColumnAttributes(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    is_nullable: bool


class Entity(BaseModel):
    """One table reconstructed from the catalog: its name and column attributes, in column order."""
    model_config = ConfigDict(frozen=True)

    name: str
    attributes: Dict[str, ColumnAttributes] = Field(default_factory=dict)


class Relationship(BaseModel):
    """One foreign-key edge: `key` is the column on `from_entity` that references `to_entity`."""
    model_config = ConfigDict(frozen=True)

    from_entity: str
    to_entity: str
    key: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
