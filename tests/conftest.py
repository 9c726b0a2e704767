import os
import tempfile

# keep per-run log files out of the working tree
os.environ.setdefault("ROTACAST_LOG_DIR", tempfile.mkdtemp(prefix="rotacast-logs-"))

import pytest

from shared.announcements.models import AnnouncementMessage


@pytest.fixture(autouse=True)
def _clear_rotacast_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("ROTACAST_") and key != "ROTACAST_LOG_DIR":
            monkeypatch.delenv(key, raising=False)


class RecordingDispatcher:
    """Dispatcher stand-in that records every (message, lines) it receives."""

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    async def dispatch(self, message, chat_lines):
        self.calls.append((message, list(chat_lines)))
        if self.fail:
            raise RuntimeError("dispatch exploded")
        return [{"recipient": "recording", "status": "success"}]


def make_message(name, *, priority=0, enabled=True, lines=("hello",), center=True):
    return AnnouncementMessage(
        name=name,
        chat_lines=tuple(lines),
        center_chat=center,
        priority=priority,
        enabled=enabled,
    )


@pytest.fixture
def recording_dispatcher():
    return RecordingDispatcher()
