from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from shared.announcements.models import AnnouncementMessage, NotificationSpec, TitleSpec
from shared.logging.logger import get_logger
from shared.markup.translator import strip_all_markup, translate_legacy_to_canonical

log = get_logger("services.broadcast.dispatcher")


# ------------------------------------------------------------
# Payload helpers
# ------------------------------------------------------------

def format_notification(spec: NotificationSpec) -> Dict[str, str]:
    """Notification text keeps its markup, in canonical form."""
    return {
        "title": translate_legacy_to_canonical(spec.title),
        "subtitle": translate_legacy_to_canonical(spec.subtitle),
    }


def format_title(spec: TitleSpec) -> Dict[str, str]:
    """Titles are shown as plain text."""
    return {
        "title": strip_all_markup(translate_legacy_to_canonical(spec.title)),
        "subtitle": strip_all_markup(translate_legacy_to_canonical(spec.subtitle)),
    }


@dataclass(frozen=True)
class Broadcast:
    """
    One announcement ready to send.

    ``chat_lines`` are already in display form (offset stripped, legacy codes
    translated, centered when the message asks for it).
    """

    message: AnnouncementMessage
    chat_lines: Sequence[str] = field(default_factory=tuple)
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def name(self) -> str:
        return self.message.name

    def notification(self) -> Optional[Dict[str, str]]:
        if self.message.notification is None:
            return None
        return format_notification(self.message.notification)

    def title(self) -> Optional[Dict[str, str]]:
        if self.message.title is None:
            return None
        return format_title(self.message.title)


# ------------------------------------------------------------
# Recipients
# ------------------------------------------------------------

class Recipient(ABC):
    """
    A destination for announcements.

    Implementations raise on failure; the dispatcher owns error handling.
    """

    recipient_id: str = "recipient"

    @abstractmethod
    async def deliver(self, broadcast: Broadcast) -> None:
        raise NotImplementedError


class LogRecipient(Recipient):
    """Writes every part of a broadcast to the runtime log."""

    recipient_id = "log"

    def __init__(self, logger=None) -> None:
        self._log = logger or get_logger("services.broadcast.announcements")

    async def deliver(self, broadcast: Broadcast) -> None:
        for line in broadcast.chat_lines:
            self._log.info(f"[{broadcast.name}] chat: {line}")

        notification = broadcast.notification()
        if notification:
            self._log.info(
                f"[{broadcast.name}] notification: "
                f"{notification['title']} | {notification['subtitle']}"
            )

        title = broadcast.title()
        if title:
            major = " (major)" if broadcast.message.title.is_major else ""
            self._log.info(
                f"[{broadcast.name}] title{major}: {title['title']} | {title['subtitle']}"
            )

        sound = broadcast.message.sound
        if sound is not None and sound.playable:
            self._log.info(
                f"[{broadcast.name}] sound: {sound.name} "
                f"(volume={sound.volume}, pitch={sound.pitch})"
            )


# ------------------------------------------------------------
# Dispatcher
# ------------------------------------------------------------

class BroadcastDispatcher:
    """
    Fans one announcement out to every registered recipient.

    Delivery is best-effort and never raises to callers: a failing recipient
    is logged and reported in the result list, and the rest still receive the
    broadcast.
    """

    def __init__(self, recipients: Optional[Sequence[Recipient]] = None) -> None:
        self._recipients: List[Recipient] = []
        for recipient in recipients or ():
            self.register(recipient)

    # ------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------

    def register(self, recipient: Recipient) -> None:
        if recipient is None:
            return
        self._recipients.append(recipient)
        log.debug(f"Registered broadcast recipient: {recipient.recipient_id}")

    @property
    def recipients(self) -> List[Recipient]:
        return list(self._recipients)

    # ------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------

    async def dispatch(
        self, message: AnnouncementMessage, chat_lines: Sequence[str]
    ) -> List[Dict[str, Any]]:
        broadcast = Broadcast(message=message, chat_lines=tuple(chat_lines))

        if not message.has_payload:
            log.debug(f"[{message.name}] Announcement has no payload; nothing to send")

        results: List[Dict[str, Any]] = []
        for recipient in self._recipients:
            try:
                await recipient.deliver(broadcast)
                results.append({"recipient": recipient.recipient_id, "status": "success"})
            except Exception as e:
                err = str(e) or e.__class__.__name__
                log.warning(
                    f"[{message.name}] Delivery failed "
                    f"(recipient={recipient.recipient_id}): {err}"
                )
                results.append(
                    {
                        "recipient": recipient.recipient_id,
                        "status": "failed",
                        "error": err,
                    }
                )

        delivered = sum(1 for r in results if r["status"] == "success")
        log.info(
            f"[{message.name}] Announcement delivered to "
            f"{delivered}/{len(results)} recipient(s)"
        )
        return results


__all__ = [
    "Broadcast",
    "BroadcastDispatcher",
    "LogRecipient",
    "Recipient",
    "format_notification",
    "format_title",
]
