import asyncio
import threading
import time

from core.scheduler import THREAD_NAME, RotationScheduler
from shared.config.announcements import RotationConfig
from shared.markup.centering import CenteringPolicy
from shared.storage.message_store import MessageStore

from conftest import RecordingDispatcher, make_message


class ThreadedDispatcher:
    """Records ticks from the scheduler thread and lets tests wait on them."""

    def __init__(self, delay=0.0):
        self.calls = []
        self.threads = []
        self.delay = delay
        self._lock = threading.Lock()
        self._event = threading.Event()

    async def dispatch(self, message, chat_lines):
        with self._lock:
            self.calls.append(message.name)
            self.threads.append(threading.current_thread().name)
            self._event.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        return []

    def wait_for_calls(self, count, timeout=5.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self._lock:
                if len(self.calls) >= count:
                    return True
            self._event.wait(0.05)
            self._event.clear()
        return False


def _store(*names):
    return MessageStore([make_message(name) for name in names])


def _scheduler(store, dispatcher, interval=60, randomized=False, **kwargs):
    config = {"rotation": RotationConfig(interval_seconds=interval, randomized=randomized)}
    scheduler = RotationScheduler(store, dispatcher, lambda: config["rotation"], **kwargs)
    return scheduler, config


# ------------------------------------------------------------
# Tick behaviour
# ------------------------------------------------------------

def test_sequential_ticks_walk_the_store_in_order():
    dispatcher = RecordingDispatcher()
    scheduler, _ = _scheduler(_store("a", "b", "c"), dispatcher)

    for _ in range(4):
        asyncio.run(scheduler._tick(False))

    assert [m.name for m, _ in dispatcher.calls] == ["a", "b", "c", "a"]
    assert scheduler.cursor == 4


def test_empty_store_tick_is_a_quiet_no_op():
    dispatcher = RecordingDispatcher()
    scheduler, _ = _scheduler(MessageStore(), dispatcher)

    assert asyncio.run(scheduler._tick(False)) is None
    assert dispatcher.calls == []
    assert scheduler.cursor == 0


def test_randomized_tick_does_not_touch_cursor():
    dispatcher = RecordingDispatcher()
    scheduler, _ = _scheduler(_store("a", "b"), dispatcher)

    picked = asyncio.run(scheduler._tick(True))

    assert picked.name in {"a", "b"}
    assert scheduler.cursor == 0


def test_tick_renders_lines_through_the_centering_policy():
    dispatcher = RecordingDispatcher()
    store = MessageStore([make_message("m", lines=("<offset:1>&aHi", ""))])
    scheduler, _ = _scheduler(store, dispatcher)

    asyncio.run(scheduler._tick(False, CenteringPolicy(10)))

    _, lines = dispatcher.calls[0]
    # (10 - 2) // 2 + 1 = 5
    assert lines == [" " * 5 + "<color:green>Hi"]


def test_uncentered_message_is_sent_without_padding():
    dispatcher = RecordingDispatcher()
    store = MessageStore([make_message("m", lines=("&lBold",), center=False)])
    scheduler, _ = _scheduler(store, dispatcher)

    asyncio.run(scheduler._tick(False, CenteringPolicy(80)))

    assert dispatcher.calls[0][1] == ["<b>Bold"]


def test_dispatch_failure_is_contained_and_cursor_still_advances():
    dispatcher = RecordingDispatcher(fail=True)
    scheduler, _ = _scheduler(_store("a", "b"), dispatcher)

    assert asyncio.run(scheduler._tick(False)) is None
    asyncio.run(scheduler._tick(False))

    assert [m.name for m, _ in dispatcher.calls] == ["a", "b"]
    assert scheduler.cursor == 2


# ------------------------------------------------------------
# Lifecycle
# ------------------------------------------------------------

def test_start_fires_immediately_on_a_dedicated_thread():
    dispatcher = ThreadedDispatcher()
    scheduler, _ = _scheduler(_store("a"), dispatcher, interval=60)

    scheduler.start()
    try:
        assert scheduler.is_running()
        assert dispatcher.wait_for_calls(1)
    finally:
        scheduler.stop()

    assert not scheduler.is_running()
    assert dispatcher.threads == [THREAD_NAME]


def test_stop_is_idempotent():
    scheduler, _ = _scheduler(_store("a"), ThreadedDispatcher())

    scheduler.stop()
    scheduler.start()
    scheduler.stop()
    scheduler.stop()

    assert scheduler.is_running() is False


def test_second_start_is_ignored():
    dispatcher = ThreadedDispatcher()
    scheduler, _ = _scheduler(_store("a"), dispatcher, interval=60)

    scheduler.start()
    try:
        run = scheduler._run
        scheduler.start()
        assert scheduler._run is run
        assert dispatcher.wait_for_calls(1)
        time.sleep(0.1)
        assert len(dispatcher.calls) == 1
    finally:
        scheduler.stop()


def test_no_ticks_after_stop_returns():
    dispatcher = ThreadedDispatcher()
    scheduler, _ = _scheduler(_store("a", "b"), dispatcher, interval=1)

    scheduler.start()
    assert dispatcher.wait_for_calls(1)
    scheduler.stop()
    seen = len(dispatcher.calls)
    time.sleep(1.3)

    assert len(dispatcher.calls) == seen


def test_fixed_rate_ticks_follow_the_interval():
    dispatcher = ThreadedDispatcher()
    scheduler, _ = _scheduler(_store("a"), dispatcher, interval=1)

    scheduler.start()
    try:
        assert dispatcher.wait_for_calls(3, timeout=4.0)
    finally:
        scheduler.stop()

    # immediate tick plus one per second
    assert 3 <= len(dispatcher.calls) <= 4


def test_overrunning_tick_delays_but_never_overlaps():
    dispatcher = ThreadedDispatcher(delay=1.5)
    scheduler, _ = _scheduler(_store("a"), dispatcher, interval=1)

    scheduler.start()
    try:
        assert dispatcher.wait_for_calls(2, timeout=4.0)
    finally:
        scheduler.stop()

    # the second tick was due at t=1 but starts after the first ends at t=1.5
    assert len(dispatcher.calls) == 2


def test_stop_forces_shutdown_after_grace_period():
    dispatcher = ThreadedDispatcher(delay=30)
    scheduler, _ = _scheduler(_store("a"), dispatcher, interval=60, grace_seconds=0.2)

    scheduler.start()
    assert dispatcher.wait_for_calls(1)
    run = scheduler._run

    started = time.monotonic()
    scheduler.stop()
    elapsed = time.monotonic() - started

    assert elapsed < 3.0
    assert not scheduler.is_running()
    run.thread.join(2.0)
    assert not run.thread.is_alive()


def test_restart_picks_up_new_config_and_keeps_cursor():
    dispatcher = ThreadedDispatcher()
    scheduler, config = _scheduler(_store("a", "b", "c"), dispatcher, interval=60)

    scheduler.start()
    assert dispatcher.wait_for_calls(1)
    config["rotation"] = RotationConfig(interval_seconds=30, randomized=False)
    scheduler.restart()
    try:
        assert dispatcher.wait_for_calls(2)
        assert scheduler._run.interval == 30
    finally:
        scheduler.stop()

    assert dispatcher.calls == ["a", "b"]


def test_config_changes_have_no_effect_until_restart():
    dispatcher = ThreadedDispatcher()
    scheduler, config = _scheduler(_store("a"), dispatcher, interval=60)

    scheduler.start()
    try:
        config["rotation"] = RotationConfig(interval_seconds=1, randomized=True)
        assert scheduler._run.interval == 60
        assert scheduler._run.randomized is False
    finally:
        scheduler.stop()


def test_centering_provider_is_read_at_start():
    widths = [40]
    dispatcher = ThreadedDispatcher()
    scheduler, _ = _scheduler(
        _store("a"),
        dispatcher,
        centering_provider=lambda: CenteringPolicy(widths[0]),
    )

    scheduler.start()
    try:
        widths[0] = 100
        assert scheduler._run.policy.target_width == 40
    finally:
        scheduler.stop()
