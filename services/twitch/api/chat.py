import asyncio

from shared.logging.logger import get_logger

log = get_logger("services.twitch.chat")


class TwitchChatClient:
    """
    Minimal send-only Twitch IRC-over-TLS client.

    - No event loop creation on import.
    - Connection lifecycle is owned by callers.
    """

    HOST = "irc.chat.twitch.tv"
    PORT = 6697

    def __init__(self, token: str, nickname: str, channel: str):
        self.token = self._normalize_token(token)
        self.nickname = nickname
        self.channel = self._normalize_channel(channel)

        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

        self._connected = False

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def connect(self) -> None:
        """
        Establish TLS IRC connection and join the configured channel.
        """
        if self._connected:
            log.debug("TwitchChatClient already connected")
            return

        log.info(
            f"Connecting to Twitch IRC ({self.HOST}:{self.PORT}) "
            f"as nick={self.nickname} channel=#{self.channel}"
        )
        self.reader, self.writer = await asyncio.open_connection(
            self.HOST, self.PORT, ssl=True
        )

        await self._send_raw(f"PASS {self.token}")
        await self._send_raw(f"NICK {self.nickname}")
        await self._send_raw(f"JOIN #{self.channel}")
        self._connected = True
        log.info(f"Joined Twitch channel #{self.channel}")

    async def close(self) -> None:
        if not self.writer:
            return

        log.debug("Closing Twitch IRC connection")
        try:
            await self._send_raw("PART #" + self.channel)
            self.writer.close()
            await self.writer.wait_closed()
        except (OSError, RuntimeError) as e:
            log.debug(f"Error during Twitch IRC close ignored: {e}")
        finally:
            self.reader = None
            self.writer = None
            self._connected = False

    # ------------------------------------------------------------------ #
    # Messaging
    # ------------------------------------------------------------------ #

    async def send_message(self, text: str) -> None:
        if not text.strip():
            return

        await self._send_raw(f"PRIVMSG #{self.channel} :{text}")
        log.debug(f"[#{self.channel}] Sent chat message ({len(text)} chars)")

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    async def _send_raw(self, data: str) -> None:
        if not self.writer:
            raise RuntimeError("IRC writer is not initialized")

        # IRC lines cannot carry embedded newlines
        data = data.replace("\r", " ").replace("\n", " ")
        payload = (data + "\r\n").encode("utf-8")
        self.writer.write(payload)
        await self.writer.drain()

    @staticmethod
    def _normalize_token(token: str) -> str:
        token = token.strip()
        if not token.startswith("oauth:"):
            return f"oauth:{token}"
        return token

    @staticmethod
    def _normalize_channel(channel: str) -> str:
        return channel.lstrip("#").strip()
