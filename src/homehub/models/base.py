"""Shared pydantic configuration for household document records."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="allow",
)


class Record(BaseModel):
    """Base for records stored in a document section.

    Attributes are snake_case in Python and camelCase in the stored JSON. Fields the
    models do not know about are kept so documents written by newer clients survive a
    round trip.
    """

    model_config = RECORD_CONFIG

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def wire_key(cls, key: str) -> str:
        """Return the stored (camelCase) key for a field name or alias."""

        field = cls.model_fields.get(key)
        if field is not None and field.alias:
            return field.alias
        return key

    @classmethod
    def wire_changes(cls, changes: Mapping[str, Any]) -> dict[str, Any]:
        return {cls.wire_key(key): value for key, value in changes.items()}


class Entity(Record):
    """Record addressed by a generated string id."""

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


__all__ = ["RECORD_CONFIG", "Entity", "Record"]
