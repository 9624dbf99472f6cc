"""Test doubles for the notification platform and job scheduler."""

from __future__ import annotations

from typing import Any

from homehub.notifications.capability import NotificationOptions


class FakeNotifier:
    """Notification capability that records what it was asked to do."""

    def __init__(self, permission: str = "granted", grant_on_request: bool = True) -> None:
        self.permission = permission
        self.grant_on_request = grant_on_request
        self.shown: list[tuple[str, NotificationOptions]] = []
        self.dismissed: list[str] = []

    def supported(self) -> bool:
        return self.permission != "unsupported"

    def permission_status(self) -> str:
        return self.permission

    def request(self) -> str:
        if self.grant_on_request and self.permission != "unsupported":
            self.permission = "granted"
        return self.permission

    def show(self, title: str, options: NotificationOptions) -> bool:
        self.shown.append((title, options))
        return True

    def dismiss(self, tag: str) -> None:
        self.dismissed.append(tag)

    @property
    def titles(self) -> list[str]:
        return [title for title, _ in self.shown]


class FakeScheduler:
    """Collects ``add_job`` calls instead of running them."""

    def __init__(self) -> None:
        self.jobs: list[dict[str, Any]] = []

    def add_job(self, func: Any, trigger: Any = None, **kwargs: Any) -> None:
        self.jobs.append({"func": func, "trigger": trigger, **kwargs})
