"""Root logging setup that keeps household credentials out of log output."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, Sequence

if TYPE_CHECKING:
    from homehub.config import Settings

REDACTED = "[redacted]"

# Group 1 is kept, group 2 is the credential.
CREDENTIAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(Bearer\s+)([A-Za-z0-9\-._~+/=]+)", re.IGNORECASE),
    re.compile(r"()(\bgh[pousr]_[A-Za-z0-9]{16,})"),
    re.compile(r"()(\bgithub_pat_[A-Za-z0-9_]{20,})"),
    re.compile(r"((?:api_token|access_token)=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(X-API-Key[=:]\s*)([^&\s]+)", re.IGNORECASE),
)

QUIET_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "apscheduler", "httpx")


def redact(text: str, secrets: Sequence[str] = ()) -> str:
    """Mask credential-shaped substrings and every configured secret in ``text``."""

    for pattern in CREDENTIAL_PATTERNS:
        text = pattern.sub(r"\1" + REDACTED, text)
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


class SensitiveDataFilter(logging.Filter):
    """Rewrite log records so neither the message nor string extras carry a secret."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self._secrets = [secret.strip() for secret in secrets if secret and secret.strip()]

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - standard interface
        message = record.getMessage()
        cleaned = redact(message, self._secrets)
        if cleaned != message:
            record.msg = cleaned
            record.args = ()

        for key, value in list(vars(record).items()):
            if key != "msg" and isinstance(value, str):
                setattr(record, key, redact(value, self._secrets))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; carries the request id when the access log sets one."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - override
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if request_id := getattr(record, "request_id", None):
            payload["request_id"] = request_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(level_name: str, fmt: str, secrets: Iterable[str]) -> None:
    """Install a single redacting handler on the root logger."""

    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if (fmt or "plain").lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )
    redactor = SensitiveDataFilter(secrets)
    handler.addFilter(redactor)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    logging.captureWarnings(True)

    for name in QUIET_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers = []
        library_logger.setLevel(level)
        library_logger.propagate = True
        library_logger.addFilter(redactor)


def configure_from_settings(settings: "Settings") -> None:
    """Configure logging with every credential in ``settings`` registered as a secret."""

    secrets = [
        settings.api_token or "",
        settings.github_token or "",
        settings.home_assistant_token or "",
    ]
    configure_logging(settings.log_level, settings.log_format, secrets)


__all__ = [
    "JsonFormatter",
    "REDACTED",
    "SensitiveDataFilter",
    "configure_from_settings",
    "configure_logging",
    "redact",
]
