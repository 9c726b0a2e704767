import asyncio
import json

import discord
import httpx
import pytest

from services.broadcast.dispatcher import Broadcast
from services.discord.embeds import notification_embed, title_embed
from services.discord.webhook import DiscordWebhookRecipient
from services.twitch.api.chat import TwitchChatClient
from services.twitch.recipient import TwitchChatRecipient
from shared.announcements.models import AnnouncementMessage, NotificationSpec, TitleSpec

WEBHOOK = "https://discord.example/api/webhooks/1/token"


def _message(**raw):
    return AnnouncementMessage.from_dict(raw, name="promo")


# ------------------------------------------------------------
# Discord
# ------------------------------------------------------------

def test_notification_embed_uses_first_color_and_plain_text():
    embed = notification_embed(
        NotificationSpec(title="&cAlert &aok", subtitle="&7soon", icon="https://x/icon.png")
    )

    assert embed.title == "Alert ok"
    assert embed.description == "soon"
    assert embed.color == discord.Color.from_rgb(255, 85, 85)
    assert embed.thumbnail.url == "https://x/icon.png"


def test_title_embed_is_gold_when_major():
    assert title_embed(TitleSpec(title="Big", is_major=True)).color == discord.Color.gold()
    assert title_embed(TitleSpec(title="small")).color == discord.Color.blurple()


def test_webhook_payload_wraps_chat_in_code_block():
    recipient = DiscordWebhookRecipient(WEBHOOK, username="RotaCast")
    broadcast = Broadcast(
        _message(chat_messages=["x"], notification={"title": "N"}),
        ("   <color:gold>Hi", "<b>there"),
    )

    payload = recipient.build_payload(broadcast)

    assert payload["content"] == "```\n   Hi\nthere\n```"
    assert payload["username"] == "RotaCast"
    assert len(payload["embeds"]) == 1
    assert payload["embeds"][0]["title"] == "N"


def test_webhook_payload_is_none_without_content():
    recipient = DiscordWebhookRecipient(WEBHOOK)
    assert recipient.build_payload(Broadcast(_message(sound={"sound_name": "x"}), ())) is None


def test_webhook_deliver_posts_json():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(204)

    recipient = DiscordWebhookRecipient(WEBHOOK, transport=httpx.MockTransport(handler))
    asyncio.run(recipient.deliver(Broadcast(_message(), ("hello",))))

    assert len(seen) == 1
    assert str(seen[0].url) == WEBHOOK
    assert json.loads(seen[0].content)["content"] == "```\nhello\n```"


def test_webhook_deliver_raises_on_error_status():
    recipient = DiscordWebhookRecipient(
        WEBHOOK, transport=httpx.MockTransport(lambda request: httpx.Response(429))
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(recipient.deliver(Broadcast(_message(), ("hello",))))


def test_webhook_requires_url():
    with pytest.raises(ValueError):
        DiscordWebhookRecipient("")


# ------------------------------------------------------------
# Twitch
# ------------------------------------------------------------

class FakeTwitchClient:
    def __init__(self, fail_on_send=False):
        self.events = []
        self.fail_on_send = fail_on_send

    async def connect(self):
        self.events.append("connect")

    async def send_message(self, text):
        if self.fail_on_send:
            raise ConnectionResetError("dropped")
        self.events.append(("send", text))

    async def close(self):
        self.events.append("close")


def test_twitch_recipient_sends_plain_lines_in_order():
    client = FakeTwitchClient()
    recipient = TwitchChatRecipient(
        oauth_token="abc", channel="#chan", client_factory=lambda: client
    )
    message = _message(
        notification={"title": "&aSale", "subtitle": "today"},
        title={"title": "&lWelcome"},
        sound={"sound_name": "ding"},
    )

    asyncio.run(recipient.deliver(Broadcast(message, ("     <color:gold>Hi", "   "))))

    assert client.events == [
        "connect",
        ("send", "Hi"),
        ("send", "Sale - today"),
        ("send", "Welcome"),
        "close",
    ]


def test_twitch_recipient_closes_after_send_failure():
    client = FakeTwitchClient(fail_on_send=True)
    recipient = TwitchChatRecipient(
        oauth_token="abc", channel="chan", client_factory=lambda: client
    )

    with pytest.raises(ConnectionResetError):
        asyncio.run(recipient.deliver(Broadcast(_message(), ("hi",))))

    assert client.events == ["connect", "close"]


def test_twitch_recipient_skips_connection_when_nothing_to_send():
    client = FakeTwitchClient()
    recipient = TwitchChatRecipient(
        oauth_token="abc", channel="chan", client_factory=lambda: client
    )

    asyncio.run(recipient.deliver(Broadcast(_message(sound={"sound_name": "x"}), ())))

    assert client.events == []


def test_twitch_client_normalizes_token_and_channel():
    client = TwitchChatClient("abc", "bot", "#Chan ")
    assert client.token == "oauth:abc"
    assert client.channel == "Chan"
    assert TwitchChatClient("oauth:xyz", "bot", "c").token == "oauth:xyz"


def test_twitch_recipient_requires_credentials():
    with pytest.raises(ValueError):
        TwitchChatRecipient(oauth_token="", channel="chan")
