"""
Announcement service.

The one long-lived object the runtime builds: it owns the config, the message
store, the loader, the dispatcher and the rotation scheduler, and exposes the
operator operations (load, start, reload, manual announce, shutdown).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from core.config_loader import MessageLoader
from core.scheduler import DEFAULT_GRACE_SECONDS, RotationScheduler
from services.broadcast.dispatcher import BroadcastDispatcher
from shared.announcements.models import AnnouncementMessage
from shared.config.announcements import (
    AnnouncementConfig,
    RotationConfig,
    load_announcement_config,
)
from shared.logging.logger import get_logger, set_log_level
from shared.markup.centering import CenteringPolicy
from shared.storage.message_store import MessageStore

log = get_logger("core.announcer")


# ------------------------------------------------------------
# Errors
# ------------------------------------------------------------

class AnnouncementError(Exception):
    """Base error for operator-facing announcement failures."""


class MessageNotFoundError(AnnouncementError):
    def __init__(self, name: str, available: Sequence[str]) -> None:
        self.name = name
        self.available = list(available)
        listing = ", ".join(self.available) if self.available else "none"
        super().__init__(f"Message '{name}' not found. Available messages: {listing}")


class MessageDisabledError(AnnouncementError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Message '{name}' is disabled")


@dataclass(frozen=True)
class ReloadResult:
    config_changed: bool
    message_count: int
    restarted: bool


# ------------------------------------------------------------
# Service
# ------------------------------------------------------------

class AnnouncementService:
    CONFIG_FILE = "config.json"
    MESSAGES_DIR = "messages"

    def __init__(
        self,
        data_dir: Path,
        dispatcher: BroadcastDispatcher,
        *,
        store: Optional[MessageStore] = None,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.config_path = self.data_dir / self.CONFIG_FILE
        self.messages_dir = self.data_dir / self.MESSAGES_DIR

        self.dispatcher = dispatcher
        self.store = store or MessageStore()
        self.loader = MessageLoader(self.messages_dir)
        self.config = AnnouncementConfig()

        self.scheduler = RotationScheduler(
            self.store,
            self.dispatcher,
            self._rotation_config,
            centering_provider=self._centering_policy,
            grace_seconds=grace_seconds,
        )

    # ------------------------------------------------------------
    # Providers read by the scheduler at start time
    # ------------------------------------------------------------

    def _rotation_config(self) -> RotationConfig:
        return self.config.rotation

    def _centering_policy(self) -> CenteringPolicy:
        return CenteringPolicy(self.config.center_width)

    def watch_paths(self) -> List[Path]:
        """Files whose edits should trigger a reload."""
        return [self.config_path, *self.loader.discover()]

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def load(self) -> int:
        """Read config and messages from disk and swap them in."""
        self.config = load_announcement_config(self.config_path)
        set_log_level(self.config.log_level)

        if self.config.create_example_messages:
            self.loader.create_example_templates()

        self.store.replace_all(self.loader.load())
        return self.store.count()

    def start(self) -> None:
        self.scheduler.start()

    def shutdown(self) -> None:
        if self.scheduler.is_running():
            self.scheduler.stop()
        log.info("Announcement service stopped")

    def reload(self) -> ReloadResult:
        """
        Re-read config and messages.

        The scheduler is restarted when the rotation settings changed or it
        is running; restarting is the only way new interval, policy or width
        values take effect.
        """
        old_rotation = self.config.rotation
        old_width = self.config.center_width

        count = self.load()

        config_changed = (
            self.config.rotation != old_rotation
            or self.config.center_width != old_width
        )

        restarted = False
        if config_changed or self.scheduler.is_running():
            self.scheduler.restart()
            restarted = True

        if config_changed:
            log.info("Configuration and messages reloaded with new values")
        else:
            log.info("Configuration and messages reloaded")

        return ReloadResult(
            config_changed=config_changed,
            message_count=count,
            restarted=restarted,
        )

    # ------------------------------------------------------------
    # Manual announce
    # ------------------------------------------------------------

    def find_message(self, name: str) -> AnnouncementMessage:
        """
        Resolve a message by name, re-reading its file so fresh edits apply.

        Falls back to the loaded copy when the file is gone or unreadable.
        """
        message = self.loader.load_one(name) or self.store.get(name)
        if message is None:
            raise MessageNotFoundError(name, self.store.names())
        if not message.enabled:
            raise MessageDisabledError(name)
        return message

    async def announce(self, name: str) -> List[Dict[str, Any]]:
        message = self.find_message(name)
        lines = self._centering_policy().render_lines(
            message.chat_lines, centered=message.center_chat
        )
        log.info(f"Manual announcement requested: {message.name}")
        return await self.dispatcher.dispatch(message, lines)


__all__ = [
    "AnnouncementError",
    "AnnouncementService",
    "MessageDisabledError",
    "MessageNotFoundError",
    "ReloadResult",
]
