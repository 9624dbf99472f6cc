"""The household JSON document: load, save, merge over defaults, backup and reset."""

from __future__ import annotations

import copy
import json
import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from homehub import metrics
from homehub.errors import ImportFormatError, StorageError, StorageQuotaExceededError
from homehub.feedback import Feedback, FeedbackQueue
from homehub.models.plan import Weekday, WeeklyPlan
from homehub.models.settings import HouseholdSettings
from homehub.store.backends import StorageBackend
from homehub.store.transfer import FileTransfer, JsonFileTransfer, backup_filename

logger = logging.getLogger(__name__)

STORAGE_KEY = "homeManagementData"
PROBE_KEY = "__storage_test__"

QUOTA_EXCEEDED_MESSAGE = (
    "Storage quota exceeded. Consider exporting your data and clearing old items."
)
SAVE_FAILED_MESSAGE = "Unable to save your changes. Please try again."
CLEAR_PROMPT = "Clear ALL data? This cannot be undone!"
CLEAR_CONFIRM_PROMPT = "Are you absolutely sure? All meals, plans, and tasks will be deleted."

LIST_SECTIONS = (
    "meals",
    "shoppingList",
    "householdItems",
    "cleaningTasks",
    "maintenanceTasks",
)
MAPPING_SECTIONS = ("weeklyPlan", "settings")
SECTIONS = LIST_SECTIONS + MAPPING_SECTIONS

Clock = Callable[[], datetime]
Confirm = Callable[[str], bool]


def default_document() -> dict[str, Any]:
    """Return a fresh copy of the canonical empty document."""

    return {
        "meals": [],
        "weeklyPlan": WeeklyPlan().to_document(),
        "shoppingList": [],
        "householdItems": [],
        "cleaningTasks": [],
        "maintenanceTasks": [],
        "settings": HouseholdSettings().to_document(),
    }


def _normalize_week(raw: Mapping[str, Any]) -> dict[str, list[str]]:
    week = WeeklyPlan()
    for key, meal_ids in raw.items():
        try:
            day = Weekday.parse(key)
        except ValueError:
            logger.warning("Dropping unknown weekday key %r from weekly plan", key)
            continue
        if not isinstance(meal_ids, list):
            logger.warning("Ignoring non-list meal ids for %s in weekly plan", day.value)
            continue
        week.set_meals(day, [str(meal_id) for meal_id in meal_ids])
    return week.to_document()


def merge_over_defaults(stored: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay ``stored`` on the defaults so omitted sections and fields take default values.

    Top-level keys replace the defaults; the mapping sections (weekly plan and settings)
    are merged key by key. Sections stored as ``null`` or with the wrong container type
    fall back to their defaults.
    """

    document = default_document()
    for key, value in stored.items():
        default = document.get(key)
        if value is None and key in SECTIONS:
            continue
        if key in LIST_SECTIONS and not isinstance(value, list):
            logger.warning("Section %r is not a list; using the default", key)
            continue
        if key in MAPPING_SECTIONS and not isinstance(value, Mapping):
            logger.warning("Section %r is not an object; using the default", key)
            continue
        if isinstance(default, dict) and isinstance(value, Mapping):
            merged = dict(default)
            merged.update(copy.deepcopy(dict(value)))
            document[key] = merged
        else:
            document[key] = copy.deepcopy(value)
    document["weeklyPlan"] = _normalize_week(document["weeklyPlan"])
    return document


def _check_section_types(document: Mapping[str, Any]) -> None:
    for name in LIST_SECTIONS:
        value = document.get(name)
        if value is not None and not isinstance(value, list):
            raise ImportFormatError(f"Section '{name}' must be a list")
    for name in MAPPING_SECTIONS:
        value = document.get(name)
        if value is not None and not isinstance(value, Mapping):
            raise ImportFormatError(f"Section '{name}' must be an object")


class ExportedDocument(BaseModel):
    """Backup produced by :meth:`DocumentStore.export`."""

    filename: str
    content: bytes
    exported_at: datetime

    model_config = ConfigDict(frozen=True)


class StorageInfo(BaseModel):
    """Approximate storage usage of the household document."""

    bytes: int
    kb: float
    mb: float
    percent_used: float = Field(serialization_alias="percentUsed")
    item_counts: dict[str, int] = Field(serialization_alias="itemCounts")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class DocumentStore:
    """Owner of the household document.

    Every call re-reads and re-parses the whole document from the backend; there is no
    cache and no locking, so concurrent writers overwrite each other (last write wins).
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        key: str = STORAGE_KEY,
        transfer: Optional[FileTransfer] = None,
        feedback: Optional[Feedback] = None,
        clock: Clock = datetime.now,
    ) -> None:
        self._backend = backend
        self._key = key
        self._transfer = transfer or JsonFileTransfer()
        self.feedback: Feedback = feedback or FeedbackQueue()
        self.clock = clock

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> dict[str, Any]:
        """Return the stored document merged over the defaults (defaults on any failure)."""

        try:
            raw = self._backend.read(self._key)
        except StorageError:
            logger.exception("Error loading household data")
            return default_document()
        if raw is None:
            return default_document()
        try:
            stored = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Error parsing stored household data; using defaults")
            return default_document()
        if not isinstance(stored, dict):
            logger.warning("Stored household data is not an object; using defaults")
            return default_document()
        return merge_over_defaults(stored)

    def save(self, document: Mapping[str, Any]) -> bool:
        """Persist ``document``; on failure alert the user and return ``False``."""

        payload = json.dumps(document, ensure_ascii=False)
        try:
            self._backend.write(self._key, payload)
        except StorageQuotaExceededError as exc:
            logger.error("Error saving household data: %s", exc)
            metrics.STORAGE_WRITES.labels(result="quota_exceeded").inc()
            self.feedback.alert(QUOTA_EXCEEDED_MESSAGE)
            return False
        except StorageError:
            logger.exception("Error saving household data")
            metrics.STORAGE_WRITES.labels(result="error").inc()
            self.feedback.alert(SAVE_FAILED_MESSAGE)
            return False
        metrics.STORAGE_WRITES.labels(result="ok").inc()
        return True

    def get(self, section: str) -> Any:
        return self.load().get(section)

    def set(self, section: str, value: Any) -> bool:
        document = self.load()
        document[section] = value
        return self.save(document)

    def export(self) -> ExportedDocument:
        """Serialize the document with an ``exportDate`` and remember the export time."""

        moment = self.clock()
        document = self.load()
        payload = dict(document)
        payload["exportDate"] = moment.isoformat()
        content = self._transfer.export_bytes(payload)

        document["settings"]["lastExport"] = moment.isoformat()
        if not self.save(document):
            logger.warning("Export produced but last export time could not be recorded")
        logger.info("Exported household data (%s bytes)", len(content))
        return ExportedDocument(
            filename=backup_filename(moment),
            content=content,
            exported_at=moment,
        )

    def import_bytes(self, data: bytes) -> dict[str, Any]:
        """Replace the document with an uploaded backup merged over the defaults.

        Raises ``ImportFormatError`` before anything is written when the backup is not a
        JSON object with correctly typed sections, and ``StorageError`` when the merged
        document cannot be saved.
        """

        imported = self._transfer.import_bytes(data)
        _check_section_types(imported)
        imported.pop("exportDate", None)
        document = merge_over_defaults(imported)
        if not self.save(document):
            raise StorageError("Failed to save imported data")
        logger.info("Imported household data from backup")
        return document

    def clear(self, confirm: Confirm) -> bool:
        """Delete the document after two affirmative answers from ``confirm``."""

        if not confirm(CLEAR_PROMPT):
            return False
        if not confirm(CLEAR_CONFIRM_PROMPT):
            return False
        try:
            self._backend.remove(self._key)
        except StorageError:
            logger.exception("Error clearing household data")
            return False
        logger.info("Cleared all household data")
        return True

    def storage_info(self, quota_bytes: Optional[int] = None) -> StorageInfo:
        document = self.load()
        size = len(json.dumps(document, ensure_ascii=False).encode("utf-8"))
        limit = quota_bytes or getattr(self._backend, "quota_bytes", None) or 5 * 1024 * 1024
        counts = {
            "meals": len(document["meals"]),
            "shoppingItems": len(document["shoppingList"]),
            "householdItems": len(document["householdItems"]),
            "cleaningTasks": len(document["cleaningTasks"]),
            "maintenanceTasks": len(document["maintenanceTasks"]),
        }
        return StorageInfo(
            bytes=size,
            kb=round(size / 1024, 2),
            mb=round(size / 1024 / 1024, 2),
            percent_used=round(size / limit * 100, 1),
            item_counts=counts,
        )

    def is_available(self) -> bool:
        try:
            self._backend.write(PROBE_KEY, PROBE_KEY)
            self._backend.remove(PROBE_KEY)
        except StorageError:
            return False
        return True

    def initialize(self) -> dict[str, Any]:
        """Prepare storage on start-up, persisting the defaults on first run."""

        if not self.is_available():
            logger.warning("Household storage is not available")
            return default_document()
        try:
            existing = self._backend.read(self._key)
        except StorageError:
            logger.exception("Error reading household data during start-up")
            return default_document()
        if existing is None:
            defaults = default_document()
            self.save(defaults)
            return defaults
        return self.load()


__all__ = [
    "CLEAR_CONFIRM_PROMPT",
    "CLEAR_PROMPT",
    "DocumentStore",
    "ExportedDocument",
    "QUOTA_EXCEEDED_MESSAGE",
    "SECTIONS",
    "STORAGE_KEY",
    "StorageInfo",
    "default_document",
    "merge_over_defaults",
]
