"""User feedback messages (toasts and blocking alerts) raised by household operations."""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

FeedbackLevel = Literal["success", "info", "error", "alert"]

DISPLAY_SECONDS: dict[str, float] = {"success": 3.0, "info": 3.0, "error": 5.0, "alert": 0.0}


class FeedbackMessage(BaseModel):
    """Message queued for the front end; ``duration`` 0 means it must be acknowledged."""

    level: FeedbackLevel
    message: str
    created_at: datetime = Field(default_factory=datetime.now)
    duration: float = Field(default=3.0, ge=0)

    model_config = ConfigDict(frozen=True)


class Feedback(Protocol):
    def success(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def alert(self, message: str) -> None: ...


class FeedbackQueue:
    """Log each message and keep the most recent ones until a client drains them."""

    def __init__(self, maxlen: int = 50) -> None:
        self._messages: deque[FeedbackMessage] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def _push(self, level: FeedbackLevel, message: str) -> None:
        entry = FeedbackMessage(level=level, message=message, duration=DISPLAY_SECONDS[level])
        with self._lock:
            self._messages.append(entry)

    def success(self, message: str) -> None:
        logger.info("%s", message)
        self._push("success", message)

    def info(self, message: str) -> None:
        logger.info("%s", message)
        self._push("info", message)

    def error(self, message: str) -> None:
        logger.warning("%s", message)
        self._push("error", message)

    def alert(self, message: str) -> None:
        logger.error("ALERT: %s", message)
        self._push("alert", message)

    def pending(self) -> list[FeedbackMessage]:
        with self._lock:
            return list(self._messages)

    def drain(self) -> list[FeedbackMessage]:
        """Return and forget every queued message."""

        with self._lock:
            drained = list(self._messages)
            self._messages.clear()
        return drained


__all__ = ["DISPLAY_SECONDS", "Feedback", "FeedbackLevel", "FeedbackMessage", "FeedbackQueue"]
