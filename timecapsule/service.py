"""Capsule service - wires registry, unlock engine, gate and notifications."""

import asyncio
import webbrowser
from datetime import datetime
from typing import Any, Callable

from loguru import logger

from timecapsule.capsule import engine, gate
from timecapsule.capsule.backend import FileBackend
from timecapsule.capsule.registry import CapsuleRegistry
from timecapsule.capsule.store import CapsuleStore
from timecapsule.capsule.types import Capsule, CapsuleFields, CapsuleView, Countdown
from timecapsule.config.schema import Config
from timecapsule.errors import NotFoundError, PersistenceError, TimeCapsuleError
from timecapsule.notify.dispatcher import Banner, NotificationDispatcher
from timecapsule.notify.system import build_notifier
from timecapsule.share import compose_email


class CapsuleService:
    """
    Entry point for the presentation layer.

    Runs the unlock sweep at its three trigger points: once at startup, on
    visibility regain and on a periodic timer. Every sweep reloads from the
    store first so it never acts on a stale snapshot.
    """

    def __init__(
        self,
        registry: CapsuleRegistry,
        dispatcher: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] | None = None,
        check_interval_s: float = 3600,
        on_created: Callable[[Capsule], None] | None = None,
        on_deleted: Callable[[Capsule], None] | None = None,
        on_unlocked: Callable[[list[Capsule]], None] | None = None,
        on_error: Callable[[TimeCapsuleError], None] | None = None,
        mail_opener: Callable[[str], Any] = webbrowser.open,
    ):
        self.registry = registry
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.clock = clock or registry.clock
        self.check_interval_s = check_interval_s
        self.on_created = on_created
        self.on_deleted = on_deleted
        self.on_unlocked = on_unlocked
        self.on_error = on_error
        self.mail_opener = mail_opener
        self._unsaved_marks: set[str] = set()
        self._running = False

    # ========== Lifecycle ==========

    def startup(self) -> list[Capsule]:
        """Ask for notification permission and run the startup sweep."""
        self.dispatcher.request_permission()
        unlocked = self.check_unlocked()
        if unlocked:
            logger.info(f"🎉 {len(unlocked)} capsule(s) have been unlocked!")
        logger.info(f"TimeCapsule initialized. Capsules loaded: {len(self.registry)}")
        return unlocked

    def on_visible(self) -> list[Capsule]:
        """The host regained foreground visibility; storage may have changed."""
        logger.debug("Visible again, checking for unlocks...")
        return self.check_unlocked()

    def check_unlocked(self) -> list[Capsule]:
        """
        Reload, sweep, notify and persist.

        Returns the capsules that unlocked in this pass. A failed write is
        reported through on_error and the marks are re-applied on the next
        sweep, so the same capsule is not signaled twice in this process.
        """
        self.registry.reload()
        for capsule in self.registry:
            if str(capsule.id) in self._unsaved_marks:
                capsule.notification_sent = True

        unlocked = engine.sweep_for_newly_unlocked(self.registry, self.clock())
        self._unsaved_marks.update(str(c.id) for c in unlocked)
        for capsule in unlocked:
            try:
                self.dispatcher.notify_unlocked(capsule)
            except Exception as e:
                logger.warning(f"Unlock notification for capsule {capsule.id} failed: {e}")
        if unlocked and self.on_unlocked:
            try:
                self.on_unlocked(unlocked)
            except Exception as e:
                logger.warning(f"on_unlocked callback failed: {e}")

        if self._unsaved_marks:
            if self.registry.persist():
                self._unsaved_marks.clear()
            else:
                self._report(PersistenceError("Storage error. Your data may not be saved."))

        return unlocked

    async def start_watcher(self) -> None:
        """Sweep every check_interval_s seconds until stop_watcher() is called."""
        self._running = True
        logger.info(f"Unlock watcher started (every {self.check_interval_s}s)")

        while self._running:
            await asyncio.sleep(self.check_interval_s)
            if not self._running:
                break
            try:
                logger.debug("Periodic check for unlocked capsules...")
                await asyncio.to_thread(self.check_unlocked)
            except Exception as e:
                logger.error(f"Error in unlock watcher: {e}")

        logger.info("Unlock watcher stopped")

    def stop_watcher(self) -> None:
        self._running = False
        logger.info("Unlock watcher stopping...")

    # ========== Capsules ==========

    def create(self, fields: CapsuleFields | dict[str, Any]) -> Capsule:
        try:
            capsule = self.registry.create(fields)
        except TimeCapsuleError as e:
            self._report(e)
            raise

        self.dispatcher.notify_created(capsule)
        if self.on_created:
            self.on_created(capsule)
        return capsule

    def delete(self, capsule_id: int | str) -> Capsule:
        """Delete permanently. The caller must have confirmed with the user."""
        try:
            capsule = self.registry.delete(capsule_id)
        except TimeCapsuleError as e:
            self._report(e)
            raise

        self.dispatcher.notify_deleted(capsule)
        if self.on_deleted:
            self.on_deleted(capsule)
        return capsule

    def find(self, capsule_id: int | str) -> Capsule | None:
        return self.registry.find(capsule_id)

    def list(self) -> list[Capsule]:
        return self.registry.list()

    def open(self, capsule_id: int | str, attempt: str | None = None) -> CapsuleView:
        """Look up a capsule and pass it through the access gate."""
        try:
            capsule = self.registry.get(capsule_id)
            return gate.open_capsule(capsule, self.clock(), attempt)
        except TimeCapsuleError as e:
            self._report(e)
            raise

    def verify(self, capsule: Capsule, attempt: str | None) -> bool:
        return gate.verify(capsule, attempt)

    def is_unlocked(self, capsule: Capsule) -> bool:
        return engine.is_unlocked(capsule, self.clock())

    def countdown(self, capsule: Capsule) -> Countdown:
        return engine.countdown(capsule, self.clock())

    def share(self, capsule_id: int | str) -> str:
        """
        Hand a pre-filled email to the mail handler and record the share.

        Returns the mailto URL that was opened.
        """
        try:
            capsule = self.registry.get(capsule_id)
            if not capsule.recipient_email:
                raise NotFoundError(capsule_id, "No email address found")

            url = compose_email(capsule).mailto_url
            self.mail_opener(url)
            capsule.notification_sent = True
            if not self.registry.persist():
                raise PersistenceError("Storage error. Your data may not be saved.")
        except TimeCapsuleError as e:
            self._report(e)
            raise

        self.dispatcher.notify_shared(capsule)
        logger.info(f"Shared capsule {capsule.id} with {capsule.recipient_email}")
        return url

    def _report(self, error: TimeCapsuleError) -> None:
        logger.warning(f"{type(error).__name__}: {error}")
        self.dispatcher.notify_error(str(error))
        if self.on_error:
            self.on_error(error)


def build_service(
    config: Config,
    banner: Banner | None = None,
    error_banner: Banner | None = None,
    **kwargs: Any,
) -> CapsuleService:
    """Build a file-backed service from configuration."""
    backend = FileBackend(config.data_path, max_bytes=config.storage.max_bytes)
    registry = CapsuleRegistry(CapsuleStore(backend, key=config.storage.key))
    dispatcher = NotificationDispatcher(
        build_notifier(config.notifications), banner=banner, error_banner=error_banner
    )
    return CapsuleService(
        registry,
        dispatcher,
        check_interval_s=config.watcher.check_interval_s,
        **kwargs,
    )
