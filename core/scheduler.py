"""
Announcement rotation scheduler.

Each run owns a dedicated daemon thread with its own asyncio loop. Ticks
fire at a fixed rate relative to the run's start time: tick k is due at
``start + k * interval``. A tick that overruns pushes the next one back
until it finishes, but never runs two ticks at once and never drops one.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from shared.announcements.models import AnnouncementMessage
from shared.config.announcements import RotationConfig
from shared.logging.logger import get_logger
from shared.markup.centering import CenteringPolicy
from shared.storage.message_store import MessageStore

log = get_logger("core.scheduler")

DEFAULT_GRACE_SECONDS = 5.0
THREAD_NAME = "AnnouncementScheduler"


@dataclass
class _RotationRun:
    """State for one start()..stop() cycle. Discarded when the run stops."""

    interval: float
    randomized: bool
    policy: CenteringPolicy
    halt: threading.Event = field(default_factory=threading.Event)
    ready: threading.Event = field(default_factory=threading.Event)
    thread: Optional[threading.Thread] = None
    loop: Optional[asyncio.AbstractEventLoop] = None
    task: Optional[asyncio.Task] = None
    wake: Optional[asyncio.Event] = None


class RotationScheduler:
    def __init__(
        self,
        store: MessageStore,
        dispatcher,
        config_provider: Callable[[], RotationConfig],
        *,
        centering_provider: Optional[Callable[[], CenteringPolicy]] = None,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._config_provider = config_provider
        self._centering_provider = centering_provider or CenteringPolicy
        self._grace_seconds = grace_seconds

        self._run: Optional[_RotationRun] = None

        # survives stop/start so rotation continues where it left off
        self._cursor = 0
        self._cursor_lock = threading.Lock()

    # ------------------------------------------------------------
    # State
    # ------------------------------------------------------------

    def is_running(self) -> bool:
        return self._run is not None

    @property
    def cursor(self) -> int:
        with self._cursor_lock:
            return self._cursor

    def _next_cursor(self) -> int:
        with self._cursor_lock:
            current = self._cursor
            self._cursor += 1
            return current

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def start(self) -> None:
        if self._run is not None:
            log.warning("Announcement scheduler already running; ignoring start")
            return

        cfg = self._config_provider()
        run = _RotationRun(
            interval=float(cfg.interval_seconds),
            randomized=cfg.randomized,
            policy=self._centering_provider(),
        )
        run.thread = threading.Thread(
            target=self._thread_main,
            args=(run,),
            name=THREAD_NAME,
            daemon=True,
        )

        self._run = run
        run.thread.start()
        run.ready.wait(timeout=self._grace_seconds)

        mode = "randomized" if run.randomized else "sequential"
        log.info(
            f"Announcement scheduler started "
            f"(interval={cfg.interval_seconds}s, mode={mode}, "
            f"width={run.policy.target_width})"
        )

    def stop(self) -> None:
        """
        Stop the rotation. Safe to call from any thread.

        No tick starts after this returns. A tick already in flight gets the
        grace period to finish; after that its task is cancelled and the
        thread is left to wind down on its own.
        """
        run = self._run
        if run is None:
            log.warning("Announcement scheduler is not running; ignoring stop")
            return

        self._run = None
        run.halt.set()
        self._signal(run, "wake")

        if threading.current_thread() is run.thread:
            log.info("Announcement scheduler stopping from its own thread")
            return

        run.thread.join(self._grace_seconds)
        if run.thread.is_alive():
            log.warning(
                f"Announcement tick did not finish within {self._grace_seconds}s; "
                "forcing shutdown"
            )
            self._signal(run, "cancel")
            run.thread.join(1.0)
            if run.thread.is_alive():
                log.warning("Announcement scheduler thread abandoned after forced shutdown")

        log.info("Announcement scheduler stopped")

    def restart(self) -> None:
        """Stop (when running) and start again, picking up the current config."""
        if self._run is not None:
            self.stop()
        self.start()

    @staticmethod
    def _signal(run: _RotationRun, what: str) -> None:
        loop = run.loop
        if loop is None or loop.is_closed():
            return

        try:
            if what == "wake" and run.wake is not None:
                loop.call_soon_threadsafe(run.wake.set)
            elif what == "cancel" and run.task is not None:
                loop.call_soon_threadsafe(run.task.cancel)
        except RuntimeError:
            # loop closed between the check and the call; the run is over
            log.debug(f"Scheduler loop already closed; skipped {what}")

    # ------------------------------------------------------------
    # Thread + loop
    # ------------------------------------------------------------

    def _thread_main(self, run: _RotationRun) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        run.loop = loop

        try:
            run.task = loop.create_task(self._rotate(run))
            loop.run_until_complete(run.task)
        except asyncio.CancelledError:
            log.warning("Announcement rotation cancelled during shutdown")
        finally:
            run.ready.set()

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

    async def _rotate(self, run: _RotationRun) -> None:
        loop = asyncio.get_running_loop()
        run.wake = asyncio.Event()
        run.ready.set()

        started = loop.time()
        fired = 0

        while not run.halt.is_set():
            delay = started + fired * run.interval - loop.time()
            if delay > 0:
                try:
                    await asyncio.wait_for(run.wake.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
                continue

            await self._tick(run.randomized, run.policy)
            fired += 1

    # ------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------

    async def _tick(
        self,
        randomized: bool = False,
        policy: Optional[CenteringPolicy] = None,
    ) -> Optional[AnnouncementMessage]:
        """
        Select one message and hand it to the dispatcher.

        An empty store is not an error: the tick logs and returns. Any
        failure inside selection or dispatch is logged and swallowed here so
        the rotation keeps going.
        """
        try:
            if self._store.count() == 0:
                log.info("No announcements loaded; skipping tick")
                return None

            if randomized:
                message = self._store.random_pick()
            else:
                message = self._store.sequential_pick(self._next_cursor())

            # a reload can empty the store between count() and the pick
            if message is None:
                log.info("Message store emptied during tick; skipping")
                return None

            policy = policy or self._centering_provider()
            lines = policy.render_lines(message.chat_lines, centered=message.center_chat)

            log.debug(f"Broadcasting announcement: {message.name}")
            await self._dispatcher.dispatch(message, lines)
            return message
        except Exception:
            log.exception("Announcement tick failed")
            return None


__all__ = ["RotationScheduler", "DEFAULT_GRACE_SECONDS"]
