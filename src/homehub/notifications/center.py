"""Permission handling and display of household notifications."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from homehub import metrics
from homehub.domain.base import DomainModule
from homehub.models.settings import HouseholdSettings
from homehub.notifications.capability import (
    NotificationCapability,
    NotificationOptions,
    PermissionStatus,
    UnsupportedNotifier,
)
from homehub.store.document import DocumentStore

logger = logging.getLogger(__name__)

SETTINGS_SECTION = "settings"
WELCOME_TITLE = "Home Management Hub"
WELCOME_BODY = "Notifications enabled! You'll receive reminders for tasks and meals."
DEFAULT_DISMISS_SECONDS = 5.0


class JobScheduler(Protocol):
    def add_job(self, func: Any, trigger: Any = None, **kwargs: Any) -> Any: ...


class ShownNotification(BaseModel):
    """A notification handed to the platform."""

    title: str
    options: NotificationOptions
    shown_at: datetime

    model_config = ConfigDict(frozen=True)


class NotificationCenter(DomainModule):
    """Gatekeeper between household reminders and the notification platform."""

    def __init__(
        self,
        store: DocumentStore,
        capability: Optional[NotificationCapability] = None,
        *,
        scheduler: Optional[JobScheduler] = None,
        dismiss_seconds: float = DEFAULT_DISMISS_SECONDS,
        **kwargs: Any,
    ) -> None:
        super().__init__(store, **kwargs)
        self.capability: NotificationCapability = capability or UnsupportedNotifier()
        self.scheduler = scheduler
        self.dismiss_seconds = dismiss_seconds

    def is_supported(self) -> bool:
        return self.capability.supported()

    def permission_status(self) -> PermissionStatus:
        if not self.is_supported():
            return "unsupported"
        return self.capability.permission_status()

    def settings(self) -> HouseholdSettings:
        return HouseholdSettings.model_validate(self.store.get(SETTINGS_SECTION) or {})

    def update_settings(self, **changes: Any) -> HouseholdSettings:
        """Shallow-merge ``changes`` into the settings section and persist it."""

        current = self.store.get(SETTINGS_SECTION) or {}
        merged = dict(current)
        merged.update(HouseholdSettings.wire_changes(changes))
        updated = HouseholdSettings.model_validate(merged)
        self._persist(SETTINGS_SECTION, updated.to_document())
        return updated

    def request_permission(self) -> bool:
        """Ask the platform for permission; on grant enable notifications and say hello."""

        if not self.is_supported():
            return False
        status = self.capability.request()
        if status != "granted":
            logger.info("Notification permission not granted (status=%s)", status)
            return False
        self.update_settings(notifications_enabled=True)
        self.show_notification(WELCOME_TITLE, body=WELCOME_BODY)
        return True

    def show_notification(self, title: str, **options: Any) -> Optional[ShownNotification]:
        """Display a notification; ``None`` when the platform is unavailable or not granted."""

        if not self.is_supported() or self.capability.permission_status() != "granted":
            return None
        resolved = NotificationOptions.model_validate(options)
        if not self.capability.show(title, resolved):
            return None
        metrics.NOTIFICATIONS_SHOWN.labels(tag=_metric_tag(resolved.tag)).inc()
        shown_at = self.clock()
        if self.scheduler is not None:
            self.scheduler.add_job(
                self.capability.dismiss,
                "date",
                run_date=datetime.now() + timedelta(seconds=self.dismiss_seconds),
                args=[resolved.tag],
                id=f"dismiss-{resolved.tag}",
                replace_existing=True,
            )
        logger.debug("Notification shown title=%r tag=%s", title, resolved.tag)
        return ShownNotification(title=title, options=resolved, shown_at=shown_at)

    def disable_notifications(self) -> None:
        self.update_settings(notifications_enabled=False)


def _metric_tag(tag: str) -> str:
    # One label value for all per-task tags.
    return "task" if tag.startswith("task-") else tag


__all__ = [
    "DEFAULT_DISMISS_SECONDS",
    "NotificationCenter",
    "ShownNotification",
    "WELCOME_BODY",
    "WELCOME_TITLE",
]
