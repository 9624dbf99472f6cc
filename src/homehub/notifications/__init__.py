"""Permission-gated household reminders."""

from homehub.notifications.capability import (
    NotificationCapability,
    NotificationOptions,
    UnsupportedNotifier,
    resolve_capability,
)
from homehub.notifications.center import NotificationCenter, ShownNotification
from homehub.notifications.monitor import NotificationMonitor

__all__ = [
    "NotificationCapability",
    "NotificationCenter",
    "NotificationMonitor",
    "NotificationOptions",
    "ShownNotification",
    "UnsupportedNotifier",
    "resolve_capability",
]
