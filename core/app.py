import asyncio
import os
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from core.announcer import AnnouncementService
from core.hot_reload_watcher import HotReloadConfig, build_hot_reload_watcher
from runtime.version import as_string
from services.broadcast.dispatcher import BroadcastDispatcher, LogRecipient
from services.discord.webhook import DiscordWebhookRecipient
from services.twitch.recipient import TwitchChatRecipient
from shared.logging.logger import get_logger

log = get_logger("core.app")


def data_dir_from_env() -> Path:
    return Path(os.getenv("ROTACAST_DATA_DIR", "data"))


def build_dispatcher() -> BroadcastDispatcher:
    """
    Register a recipient for every delivery channel configured in the env.

    Falls back to logging announcements when no channel is configured.
    """
    dispatcher = BroadcastDispatcher()

    twitch_token = os.getenv("TWITCH_OAUTH_TOKEN")
    twitch_channel = os.getenv("TWITCH_CHANNEL")
    log.debug(
        "[BOOT] Twitch credentials resolved: "
        f"token={'SET' if twitch_token else 'MISSING'}, "
        f"channel={'SET' if twitch_channel else 'MISSING'}"
    )
    if twitch_token and twitch_channel:
        dispatcher.register(
            TwitchChatRecipient(
                oauth_token=twitch_token,
                channel=twitch_channel,
                nickname=os.getenv("TWITCH_BOT_NICK"),
            )
        )
        log.info(f"[BOOT] Twitch chat delivery ENABLED for #{twitch_channel.lstrip('#')}")

    webhook_url = os.getenv("DISCORD_WEBHOOK_URL")
    if webhook_url:
        dispatcher.register(
            DiscordWebhookRecipient(
                webhook_url,
                username=os.getenv("DISCORD_WEBHOOK_USERNAME"),
            )
        )
        log.info("[BOOT] Discord webhook delivery ENABLED")

    if not dispatcher.recipients:
        log.info("[BOOT] No delivery channel configured; announcements go to the log")
        dispatcher.register(LogRecipient())

    return dispatcher


async def main(stop_event: asyncio.Event):
    # --------------------------------------------------
    # ENV
    # --------------------------------------------------
    load_dotenv()
    log.info("Environment variables loaded")
    log.info(f"{as_string()} booting")

    # --------------------------------------------------
    # CORE SYSTEMS
    # --------------------------------------------------
    service = AnnouncementService(data_dir_from_env(), build_dispatcher())
    count = service.load()
    log.info(f"Loaded {count} announcement(s) into rotation")

    service.start()

    # --------------------------------------------------
    # HOT RELOAD (OPTIONAL)
    # --------------------------------------------------
    watcher = build_hot_reload_watcher(
        HotReloadConfig.from_env(),
        service.watch_paths,
        service.reload,
    )
    watcher_task = None
    if watcher:
        watcher_task = asyncio.create_task(watcher.run(stop_event))

    # --------------------------------------------------
    # BLOCK UNTIL SHUTDOWN SIGNAL
    # --------------------------------------------------
    await stop_event.wait()

    log.info("Shutdown initiated")

    if watcher_task:
        await watcher_task

    # stop() joins the scheduler thread; keep the loop responsive meanwhile
    try:
        await asyncio.to_thread(service.shutdown)
    except Exception as e:
        log.warning(f"Announcement service shutdown error ignored: {e}")

    log.info("RotaCast stopped")


# ----------------------------------------------------------------------
# SIGNAL HANDLING (WINDOWS-SAFE)
# ----------------------------------------------------------------------

def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    stop_event: asyncio.Event,
):
    """
    Windows-safe Ctrl+C handler.
    Uses signal.signal + asyncio.Event to unwind cleanly.
    """

    def _handler(signum, frame):
        try:
            loop.call_soon_threadsafe(stop_event.set)
        except RuntimeError:
            stop_event.set()

    try:
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
    except (ValueError, OSError) as e:
        log.debug(f"Signal handlers not installed: {e}")


# ----------------------------------------------------------------------
# ENTRYPOINT
# ----------------------------------------------------------------------

def run():
    stop_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    _install_signal_handlers(loop, stop_event)

    try:
        loop.run_until_complete(main(stop_event))

    except KeyboardInterrupt:
        log.info("KeyboardInterrupt received; shutdown initiated")
        stop_event.set()

    finally:
        # --------------------------------------------------
        # CANCEL REMAINING TASKS (CLEANLY)
        # --------------------------------------------------
        pending = [t for t in asyncio.all_tasks(loop) if not t.done()]
        for task in pending:
            task.cancel()

        if pending:
            loop.run_until_complete(
                asyncio.gather(*pending, return_exceptions=True)
            )

        loop.run_until_complete(loop.shutdown_asyncgens())
        asyncio.set_event_loop(None)
        loop.close()


if __name__ == "__main__":
    run()
    sys.exit(0)
