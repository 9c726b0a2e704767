from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from services.broadcast.dispatcher import Broadcast, Recipient
from services.discord.embeds import notification_embed, title_embed
from shared.logging.logger import get_logger
from shared.markup.translator import strip_all_markup

log = get_logger("services.discord.webhook")

# Discord rejects message content longer than this
MAX_CONTENT_LENGTH = 2000


class DiscordWebhookRecipient(Recipient):
    """
    Posts announcements to a Discord channel through an incoming webhook.

    Chat lines keep their centering padding and go inside a code block so
    Discord renders them monospaced. Notification and title become embeds.
    """

    recipient_id = "discord"

    def __init__(
        self,
        webhook_url: str,
        *,
        username: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not webhook_url:
            raise ValueError("Discord recipient requires a webhook URL")

        self.webhook_url = webhook_url
        self.username = username
        self.timeout = timeout
        self._transport = transport

    # ------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------

    @staticmethod
    def _chat_block(lines: List[str]) -> Optional[str]:
        plain = [strip_all_markup(line).rstrip().replace("```", "'''") for line in lines]
        if not any(line.strip() for line in plain):
            return None

        block = "```\n" + "\n".join(plain) + "\n```"
        if len(block) > MAX_CONTENT_LENGTH:
            log.warning(
                f"Chat block is {len(block)} chars; truncating to {MAX_CONTENT_LENGTH}"
            )
            block = block[: MAX_CONTENT_LENGTH - 4] + "\n```"
        return block

    def build_payload(self, broadcast: Broadcast) -> Optional[Dict[str, Any]]:
        """Webhook JSON body for a broadcast, or None when there is nothing to post."""
        message = broadcast.message
        payload: Dict[str, Any] = {}

        content = self._chat_block(list(broadcast.chat_lines))
        if content:
            payload["content"] = content

        embeds = []
        if message.notification is not None:
            embeds.append(notification_embed(message.notification).to_dict())
        if message.title is not None:
            embeds.append(title_embed(message.title).to_dict())
        if embeds:
            payload["embeds"] = embeds

        if not payload:
            return None

        if self.username:
            payload["username"] = self.username
        return payload

    # ------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------

    async def deliver(self, broadcast: Broadcast) -> None:
        payload = self.build_payload(broadcast)
        if payload is None:
            log.debug(f"[{broadcast.name}] Nothing to post to Discord")
            return

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(self.webhook_url, json=payload)
            resp.raise_for_status()

        log.info(f"[{broadcast.name}] Posted announcement to Discord webhook")


__all__ = ["DiscordWebhookRecipient", "MAX_CONTENT_LENGTH"]
