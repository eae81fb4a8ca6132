"""System-level notification channels."""

import shutil
import subprocess
from typing import Literal

import httpx
from loguru import logger

from timecapsule.config.schema import NotificationsConfig

Permission = Literal["default", "granted", "denied"]


class SystemNotifier:
    """
    Base class for a system notification channel.

    Mirrors the browser model: a channel reports a permission state and only
    fires when it is "granted". `notify` may raise; callers treat delivery as
    best-effort.
    """

    name: str = "base"

    @property
    def permission(self) -> Permission:
        return "default"

    def request_permission(self) -> Permission:
        return self.permission

    def notify(self, title: str, body: str) -> None:
        raise NotImplementedError


class NullNotifier(SystemNotifier):
    """No system channel."""

    name = "none"

    @property
    def permission(self) -> Permission:
        return "denied"

    def notify(self, title: str, body: str) -> None:
        pass


class DesktopNotifier(SystemNotifier):
    """Desktop notifications through `notify-send`."""

    name = "desktop"

    def __init__(self, timeout_s: float = 5.0, command: str = "notify-send"):
        self.timeout_s = timeout_s
        self.command = command

    @property
    def permission(self) -> Permission:
        return "granted" if shutil.which(self.command) else "denied"

    def notify(self, title: str, body: str) -> None:
        subprocess.run(
            [self.command, "--app-name=timecapsule", title, body],
            check=True,
            capture_output=True,
            timeout=self.timeout_s,
        )


class WebhookNotifier(SystemNotifier):
    """POST notifications as JSON to a push endpoint."""

    name = "webhook"

    def __init__(self, url: str, timeout_s: float = 5.0):
        self.url = url
        self.timeout_s = timeout_s

    @property
    def permission(self) -> Permission:
        return "granted" if self.url else "denied"

    def notify(self, title: str, body: str) -> None:
        response = httpx.post(
            self.url,
            json={"title": title, "body": body},
            timeout=self.timeout_s,
        )
        response.raise_for_status()


def build_notifier(config: NotificationsConfig) -> SystemNotifier:
    """Pick the system channel named in the config."""
    if config.system == "desktop":
        return DesktopNotifier(timeout_s=config.timeout_s)
    if config.system == "webhook":
        if not config.webhook_url:
            logger.warning("Webhook notifications selected but no webhook_url configured")
        return WebhookNotifier(config.webhook_url, timeout_s=config.timeout_s)
    return NullNotifier()
