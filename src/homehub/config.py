"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    storage_path: Path = Field(
        default=Path("./data/homehub.db"),
        description="SQLite file backing the household document store.",
    )
    storage_key: str = Field(
        default="homeManagementData",
        description="Key under which the household JSON document is stored.",
    )
    storage_quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum serialized document size accepted by the store.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for authenticated endpoints.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    github_token: Optional[str] = Field(
        default=None,
        description="Personal access token used to commit meals to GitHub.",
    )
    github_owner: str = Field(
        default="graemewright2005-ux",
        description="Owner of the repository receiving published meals.",
    )
    github_repo: str = Field(
        default="Home-Management-Hub",
        description="Repository receiving published meals.",
    )
    github_branch: str = Field(default="main", description="Branch receiving meal commits.")
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL.",
    )
    github_timeout: Optional[float] = Field(
        default=None,
        description="Upstream timeout in seconds for meal commits (unset waits indefinitely).",
    )
    notifications_worker_enabled: bool = Field(
        default=False,
        description="Run the hourly notification poll inside the API server when true.",
    )
    notification_poll_interval: float = Field(
        default=3600.0,
        description="Seconds between notification checks.",
    )
    notification_dismiss_seconds: float = Field(
        default=5.0,
        description="Seconds before a shown notification is dismissed.",
    )
    home_assistant_base_url: Optional[str] = Field(
        default=None,
        description="Home Assistant base URL used for push notifications.",
    )
    home_assistant_token: Optional[str] = Field(
        default=None,
        description="Long-lived access token.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (storage_path := _env("HOMEHUB_STORAGE_PATH")):
        payload["storage_path"] = Path(storage_path)
    if (storage_key := _env("HOMEHUB_STORAGE_KEY")):
        payload["storage_key"] = storage_key
    if (quota := _env("HOMEHUB_STORAGE_QUOTA_BYTES")):
        try:
            payload["storage_quota_bytes"] = int(quota)
        except ValueError:
            pass
    if (api_token := _env("HOMEHUB_API_TOKEN")):
        payload["api_token"] = api_token
    if (log_level := _env("HOMEHUB_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("HOMEHUB_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("HOMEHUB_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    if (github_token := _env("GITHUB_PAT") or _env("HOMEHUB_GITHUB_TOKEN")):
        payload["github_token"] = github_token
    if (github_owner := _env("HOMEHUB_GITHUB_OWNER")):
        payload["github_owner"] = github_owner
    if (github_repo := _env("HOMEHUB_GITHUB_REPO")):
        payload["github_repo"] = github_repo
    if (github_branch := _env("HOMEHUB_GITHUB_BRANCH")):
        payload["github_branch"] = github_branch
    if (github_api_url := _env("HOMEHUB_GITHUB_API_URL")):
        payload["github_api_url"] = github_api_url
    if (github_timeout := _env("HOMEHUB_GITHUB_TIMEOUT")):
        try:
            payload["github_timeout"] = float(github_timeout)
        except ValueError:
            pass
    if (worker_enabled := _env("HOMEHUB_NOTIFICATIONS_WORKER_ENABLED")):
        payload["notifications_worker_enabled"] = _coerce_bool(worker_enabled)
    if (poll_interval := _env("HOMEHUB_NOTIFICATION_POLL_INTERVAL")):
        try:
            payload["notification_poll_interval"] = float(poll_interval)
        except ValueError:
            pass
    if (dismiss_seconds := _env("HOMEHUB_NOTIFICATION_DISMISS_SECONDS")):
        try:
            payload["notification_dismiss_seconds"] = float(dismiss_seconds)
        except ValueError:
            pass
    if (ha_url := _env("HOMEHUB_HOME_ASSISTANT_BASE_URL")):
        payload["home_assistant_base_url"] = ha_url
    if (ha_token := _env("HOMEHUB_HOME_ASSISTANT_TOKEN")):
        payload["home_assistant_token"] = ha_token
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
