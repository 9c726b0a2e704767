from __future__ import annotations

from typing import Callable, List, Optional

from services.broadcast.dispatcher import Broadcast, Recipient
from services.twitch.api.chat import TwitchChatClient
from shared.logging.logger import get_logger
from shared.markup.translator import strip_all_markup

log = get_logger("services.twitch.recipient")


class TwitchChatRecipient(Recipient):
    """
    Sends announcements into a Twitch channel's chat.

    Twitch chat has no formatting or fixed-width rendering, so chat lines go
    out as plain text with the centering padding removed. Notifications and
    titles become one extra line each; sounds have no Twitch equivalent.
    """

    recipient_id = "twitch"

    def __init__(
        self,
        *,
        oauth_token: str,
        channel: str,
        nickname: Optional[str] = None,
        client_factory: Optional[Callable[[], TwitchChatClient]] = None,
    ) -> None:
        if not oauth_token or not channel:
            raise ValueError("Twitch recipient requires an oauth token and a channel")

        self.channel = channel.lstrip("#").strip()
        self.nickname = nickname or self.channel
        self._client_factory = client_factory or (
            lambda: TwitchChatClient(oauth_token, self.nickname, self.channel)
        )

    def render(self, broadcast: Broadcast) -> List[str]:
        lines = [strip_all_markup(line).strip() for line in broadcast.chat_lines]

        notification = broadcast.notification()
        if notification:
            lines.append(
                " - ".join(
                    part for part in (
                        strip_all_markup(notification["title"]).strip(),
                        strip_all_markup(notification["subtitle"]).strip(),
                    ) if part
                )
            )

        title = broadcast.title()
        if title:
            lines.append(
                " - ".join(p for p in (title["title"].strip(), title["subtitle"].strip()) if p)
            )

        return [line for line in lines if line]

    async def deliver(self, broadcast: Broadcast) -> None:
        lines = self.render(broadcast)
        if not lines:
            log.debug(f"[{broadcast.name}] Nothing to send to Twitch")
            return

        client = self._client_factory()
        await client.connect()
        try:
            for line in lines:
                await client.send_message(line)
        finally:
            await client.close()

        log.info(f"[{broadcast.name}] Sent {len(lines)} line(s) to #{self.channel}")


__all__ = ["TwitchChatRecipient"]
