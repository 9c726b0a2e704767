"""
Optional file-backed hot reload watcher.

Disabled by default. When enabled via ROTACAST_HOT_RELOAD it polls a
content hash of the config file and every message file, and reloads the
announcement service when the hash changes.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from shared.logging.logger import get_logger
from shared.utils.hashing import stable_hash_for_paths

log = get_logger("core.hot_reload")

MIN_INTERVAL_SECONDS = 1.0


@dataclass
class HotReloadConfig:
    enabled: bool = False
    interval_seconds: float = 5.0

    @classmethod
    def from_env(cls, *, base: Optional["HotReloadConfig"] = None) -> "HotReloadConfig":
        cfg = base or cls()
        override_flag = os.getenv("ROTACAST_HOT_RELOAD")
        if override_flag is not None:
            cfg.enabled = override_flag.lower() in {"1", "true", "yes", "on"}

        interval_override = os.getenv("ROTACAST_HOT_RELOAD_INTERVAL")
        if interval_override:
            try:
                cfg.interval_seconds = float(interval_override)
            except ValueError:
                log.warning(
                    f"Invalid ROTACAST_HOT_RELOAD_INTERVAL={interval_override}; "
                    f"using {cfg.interval_seconds}"
                )

        cfg.interval_seconds = max(MIN_INTERVAL_SECONDS, float(cfg.interval_seconds or 5.0))
        return cfg


class HotReloadWatcher:
    def __init__(
        self,
        watch_paths: Callable[[], Iterable[Path]],
        *,
        on_change: Callable[[], Any],
        interval_seconds: float = 5.0,
    ) -> None:
        self._watch_paths = watch_paths
        self._on_change = on_change
        self.interval_seconds = float(interval_seconds or 5.0)
        self._running = False
        self._last_hash: Optional[str] = None

    def _compute_hash(self) -> Optional[str]:
        paths = list(self._watch_paths())
        if not paths:
            return None
        return stable_hash_for_paths(paths)

    async def poll_once(self) -> bool:
        """
        Compare the current hash with the last one; reload on change.

        The first observed hash only becomes the baseline. Returns True when
        a reload ran.
        """
        new_hash = self._compute_hash()
        if new_hash is None:
            log.debug("Hot reload watcher found no files to watch; waiting")
            return False

        if self._last_hash is None:
            self._last_hash = new_hash
            return False

        if new_hash == self._last_hash:
            return False

        self._last_hash = new_hash
        log.info("Change detected in announcement files; reloading")
        try:
            result = await asyncio.to_thread(self._on_change)
        except Exception as exc:
            log.warning(f"Hot reload failed: {exc}")
            return False

        log.info(f"Hot reload complete: {result}")
        return True

    async def run(self, stop_event: asyncio.Event) -> None:
        if self._running:
            log.warning("Hot reload watcher already running; ignoring duplicate start")
            return

        self._running = True
        log.info(f"Hot reload watcher started (interval={self.interval_seconds}s)")

        try:
            self._last_hash = self._compute_hash()
            while not stop_event.is_set():
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
                except asyncio.TimeoutError:
                    pass

                if stop_event.is_set():
                    break

                await self.poll_once()
        finally:
            self._running = False
            log.info("Hot reload watcher stopped")


def build_hot_reload_watcher(
    config: HotReloadConfig,
    watch_paths: Callable[[], Iterable[Path]],
    on_change: Callable[[], Any],
) -> Optional[HotReloadWatcher]:
    if not config.enabled:
        return None
    return HotReloadWatcher(
        watch_paths,
        on_change=on_change,
        interval_seconds=config.interval_seconds,
    )


__all__ = [
    "HotReloadWatcher",
    "HotReloadConfig",
    "build_hot_reload_watcher",
]
