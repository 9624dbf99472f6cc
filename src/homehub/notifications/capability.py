"""Platform notification capability and the options passed to it."""

from __future__ import annotations

from typing import Literal, Optional, Protocol

from pydantic import Field

from homehub.models.base import Record

PermissionStatus = Literal["granted", "denied", "default", "unsupported"]

DEFAULT_ICON = "\U0001f3e0"
DEFAULT_TAG = "home-management"


class NotificationOptions(Record):
    """Display options for a single notification.

    ``tag`` identifies the notification on the platform: showing another notification
    with the same tag replaces the earlier one.
    """

    body: str = Field(default="")
    icon: str = Field(default=DEFAULT_ICON)
    badge: str = Field(default=DEFAULT_ICON)
    tag: str = Field(default=DEFAULT_TAG)
    vibrate: list[int] = Field(default_factory=lambda: [200, 100, 200])
    renotify: bool = Field(default=False)
    require_interaction: bool = Field(default=False)


class NotificationCapability(Protocol):
    """Permission-gated platform that can display and dismiss notifications."""

    def supported(self) -> bool: ...

    def permission_status(self) -> PermissionStatus: ...

    def request(self) -> PermissionStatus: ...

    def show(self, title: str, options: NotificationOptions) -> bool: ...

    def dismiss(self, tag: str) -> None: ...


class UnsupportedNotifier:
    """Capability for hosts without any notification platform."""

    def supported(self) -> bool:
        return False

    def permission_status(self) -> PermissionStatus:
        return "unsupported"

    def request(self) -> PermissionStatus:
        return "unsupported"

    def show(self, title: str, options: NotificationOptions) -> bool:
        return False

    def dismiss(self, tag: str) -> None:
        return None


def resolve_capability(
    base_url: Optional[str], token: Optional[str], timeout: float = 10.0
) -> NotificationCapability:
    """Return the Home Assistant notifier when a base URL is configured."""

    if not base_url:
        return UnsupportedNotifier()
    from homehub.integrations.home_assistant import HomeAssistantNotifier

    return HomeAssistantNotifier(base_url=base_url, token=token, timeout=timeout)


__all__ = [
    "DEFAULT_ICON",
    "DEFAULT_TAG",
    "NotificationCapability",
    "NotificationOptions",
    "PermissionStatus",
    "UnsupportedNotifier",
    "resolve_capability",
]
