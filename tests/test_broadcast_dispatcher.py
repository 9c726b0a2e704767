import asyncio
import logging

from services.broadcast.dispatcher import (
    Broadcast,
    BroadcastDispatcher,
    LogRecipient,
    Recipient,
    format_notification,
    format_title,
)
from shared.announcements.models import AnnouncementMessage, NotificationSpec, TitleSpec

from conftest import make_message


class CollectingRecipient(Recipient):
    def __init__(self, recipient_id, fail=False):
        self.recipient_id = recipient_id
        self.fail = fail
        self.received = []

    async def deliver(self, broadcast):
        self.received.append(broadcast)
        if self.fail:
            raise ConnectionError("channel offline")


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


def test_dispatch_reaches_every_recipient_and_reports_failures():
    first = CollectingRecipient("first", fail=True)
    second = CollectingRecipient("second")
    dispatcher = BroadcastDispatcher([first, second])

    results = asyncio.run(dispatcher.dispatch(make_message("m"), ["  line"]))

    assert results == [
        {"recipient": "first", "status": "failed", "error": "channel offline"},
        {"recipient": "second", "status": "success"},
    ]
    assert second.received[0].chat_lines == ("  line",)
    assert second.received[0].name == "m"


def test_dispatch_with_no_recipients_returns_empty_results():
    assert asyncio.run(BroadcastDispatcher().dispatch(make_message("m"), [])) == []


def test_register_ignores_none():
    dispatcher = BroadcastDispatcher()
    dispatcher.register(None)
    assert dispatcher.recipients == []


def test_notification_keeps_canonical_markup_and_title_is_plain():
    assert format_notification(NotificationSpec(title="&aGo", subtitle="&lnow")) == {
        "title": "<color:green>Go",
        "subtitle": "<b>now",
    }
    assert format_title(TitleSpec(title="&6&lWelcome", subtitle="<i>friend")) == {
        "title": "Welcome",
        "subtitle": "friend",
    }


def test_log_recipient_writes_each_part():
    logger = logging.getLogger("tests.log_recipient")
    logger.setLevel(logging.INFO)
    handler = ListHandler()
    logger.addHandler(handler)
    message = AnnouncementMessage.from_dict(
        {
            "chat_messages": ["hi"],
            "notification": {"title": "&aN", "subtitle": "sub"},
            "title": {"title": "T", "is_major": True},
            "sound": {"sound_name": "ding"},
        },
        name="all",
    )

    try:
        asyncio.run(LogRecipient(logger).deliver(Broadcast(message, ("   hi",))))
    finally:
        logger.removeHandler(handler)

    assert handler.messages == [
        "[all] chat:    hi",
        "[all] notification: <color:green>N | sub",
        "[all] title (major): T | ",
        "[all] sound: ding (volume=1.0, pitch=1.0)",
    ]
