"""Backup file encoding for household document export and import."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Protocol

from homehub.errors import ImportFormatError

BACKUP_FILENAME_TEMPLATE = "home-management-backup-{date}.json"


class FileTransfer(Protocol):
    """Turns documents into downloadable bytes and uploaded bytes back into documents."""

    def export_bytes(self, document: dict[str, Any]) -> bytes: ...

    def import_bytes(self, data: bytes) -> dict[str, Any]: ...


def backup_filename(moment: datetime) -> str:
    return BACKUP_FILENAME_TEMPLATE.format(date=moment.date().isoformat())


class JsonFileTransfer:
    """Pretty-printed UTF-8 JSON backups."""

    def export_bytes(self, document: dict[str, Any]) -> bytes:
        return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")

    def import_bytes(self, data: bytes) -> dict[str, Any]:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ImportFormatError("Backup file is not valid UTF-8 text") from exc
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ImportFormatError(f"Backup file is not valid JSON: {exc.msg}") from exc
        if not isinstance(parsed, dict):
            raise ImportFormatError("Invalid data format")
        return parsed


__all__ = ["BACKUP_FILENAME_TEMPLATE", "FileTransfer", "JsonFileTransfer", "backup_filename"]
