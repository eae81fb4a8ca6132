"""Notification dispatch and system channels."""

from timecapsule.notify.dispatcher import NotificationDispatcher
from timecapsule.notify.system import (
    DesktopNotifier,
    NullNotifier,
    SystemNotifier,
    WebhookNotifier,
    build_notifier,
)

__all__ = [
    "NotificationDispatcher",
    "SystemNotifier",
    "DesktopNotifier",
    "WebhookNotifier",
    "NullNotifier",
    "build_notifier",
]
