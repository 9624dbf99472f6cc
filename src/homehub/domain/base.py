"""Read-modify-write helpers shared by the list-shaped document sections."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from pydantic import ValidationError

from homehub.errors import StorageError
from homehub.feedback import Feedback
from homehub.models.base import Entity
from homehub.store.document import DocumentStore
from homehub.utils import generate_id

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=Entity)


class DomainModule:
    """Base for the domain objects: an explicit store handle plus feedback and clock."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        feedback: Optional[Feedback] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.feedback: Feedback = feedback or store.feedback
        self.clock: Callable[[], datetime] = clock or store.clock

    def _persist(self, section: str, value: Any) -> None:
        if not self.store.set(section, value):
            raise StorageError(f"Unable to save section '{section}'")


class SectionCollection(Generic[EntityT]):
    """One list section of the document, typed by ``model``.

    Mutations operate on the raw stored dictionaries so records that fail validation
    are carried through untouched; only the record being changed is re-validated.
    """

    def __init__(self, owner: DomainModule, section: str, model: type[EntityT]) -> None:
        self._owner = owner
        self.section = section
        self.model = model

    def raw(self) -> list[dict[str, Any]]:
        value = self._owner.store.get(self.section)
        if not isinstance(value, list):
            return []
        return [entry for entry in value if isinstance(entry, dict)]

    def _parse(self, entry: Mapping[str, Any]) -> Optional[EntityT]:
        try:
            return self.model.model_validate(entry)
        except ValidationError as exc:
            logger.warning(
                "Skipping invalid %s record id=%s: %s",
                self.section,
                entry.get("id"),
                exc.errors(),
            )
            return None

    def all(self) -> list[EntityT]:
        parsed = (self._parse(entry) for entry in self.raw())
        return [record for record in parsed if record is not None]

    def find(self, record_id: str) -> Optional[EntityT]:
        for entry in self.raw():
            if str(entry.get("id")) == record_id:
                return self._parse(entry)
        return None

    def write(self, entries: list[dict[str, Any]]) -> None:
        self._owner._persist(self.section, entries)

    def append(self, fields: Mapping[str, Any], stamps: Mapping[str, Any]) -> EntityT:
        """Create a record from ``fields`` with a generated id; ``stamps`` always win."""

        payload = self.model.wire_changes(fields)
        payload.update(self.model.wire_changes(stamps))
        payload["id"] = generate_id()
        record = self.model.model_validate(payload)
        entries = self.raw()
        entries.append(record.to_document())
        self.write(entries)
        return record

    def update(self, record_id: str, changes: Mapping[str, Any]) -> Optional[EntityT]:
        """Shallow-merge ``changes`` into the record; ``None`` when the id is unknown."""

        entries = self.raw()
        for index, entry in enumerate(entries):
            if str(entry.get("id")) != record_id:
                continue
            merged = dict(entry)
            merged.update(self.model.wire_changes(changes))
            merged["id"] = entry.get("id")
            record = self.model.model_validate(merged)
            entries[index] = record.to_document()
            self.write(entries)
            return record
        return None

    def remove(self, record_id: str) -> bool:
        """Filter the id out of the section; returns whether anything was removed."""

        entries = self.raw()
        remaining = [entry for entry in entries if str(entry.get("id")) != record_id]
        self.write(remaining)
        return len(remaining) != len(entries)


__all__ = ["DomainModule", "SectionCollection"]
