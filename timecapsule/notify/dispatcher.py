"""Notification dispatcher - banners plus best-effort system notifications."""

from typing import Callable

from loguru import logger

from timecapsule.capsule.engine import format_date
from timecapsule.capsule.types import Capsule
from timecapsule.notify.system import NullNotifier, SystemNotifier

Banner = Callable[[str], None]


def _log_banner(text: str) -> None:
    logger.info(f"[banner] {text}")


class NotificationDispatcher:
    """
    Emits an in-app banner and, when permitted, a system notification.

    The banner is always attempted. System notification failures are logged
    and swallowed so they never interrupt the caller.
    """

    def __init__(
        self,
        system: SystemNotifier | None = None,
        banner: Banner | None = None,
        error_banner: Banner | None = None,
    ):
        self.system = system or NullNotifier()
        self.banner = banner or _log_banner
        self.error_banner = error_banner or self.banner

    def request_permission(self) -> str:
        """Ask the system channel for permission if it has not decided yet."""
        permission = self.system.permission
        if permission == "default":
            permission = self.system.request_permission()
        logger.debug(f"Notification permission ({self.system.name}): {permission}")
        return permission

    def notify_created(self, capsule: Capsule) -> None:
        self.banner("✓ Capsule saved successfully!")
        self._send_system(
            "🎉 Time Capsule Created!",
            f'"{capsule.title}" will unlock on {format_date(capsule.unlock_date)}',
        )

    def notify_unlocked(self, capsule: Capsule) -> None:
        """Signal an unlock. Only call with capsules returned by a sweep."""
        self.banner(f'🎉 "{capsule.title}" has unlocked! Open it with: timecapsule open {capsule.id}')
        self._send_system(
            "🎉 Time Capsule Unlocked!",
            f'"{capsule.title}" is now available to open!',
        )

    def notify_deleted(self, capsule: Capsule) -> None:
        self.banner("🗑️ Capsule deleted successfully")

    def notify_shared(self, capsule: Capsule) -> None:
        self.banner("✓ Capsule saved successfully!")

    def notify_error(self, message: str) -> None:
        self.error_banner(f"⚠ {message}")

    def _send_system(self, title: str, body: str) -> None:
        if self.system.permission != "granted":
            return
        try:
            self.system.notify(title, body)
        except Exception as e:
            logger.warning(f"System notification via {self.system.name} failed: {e}")
