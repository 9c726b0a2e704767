from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import Draft7Validator

from shared.announcements.schema import CONFIG_SCHEMA
from shared.logging.logger import get_logger
from shared.markup.centering import DEFAULT_CENTER_WIDTH

log = get_logger("shared.config.announcements")

DEFAULT_INTERVAL_SECONDS = 300
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "NONE"}


@dataclass(frozen=True)
class RotationConfig:
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    randomized: bool = False


@dataclass
class AnnouncementConfig:
    rotation: RotationConfig = field(default_factory=RotationConfig)
    center_width: int = DEFAULT_CENTER_WIDTH
    create_example_messages: bool = True
    log_level: str = "INFO"
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interval_seconds": self.rotation.interval_seconds,
            "enable_randomization": self.rotation.randomized,
            "create_example_messages": self.create_example_messages,
            "center_width": self.center_width,
            "log_level": self.log_level,
            "version": self.version,
        }


# ------------------------------------------------------------
# Field loaders
# ------------------------------------------------------------

def _get(raw: Dict[str, Any], key: str, legacy_key: str) -> Any:
    value = raw.get(key)
    return raw.get(legacy_key) if value is None else value


def _positive_int(value: Any, default: int, name: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        log.warning(f"{name} must be a positive integer; defaulting to {default}")
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        log.warning(f"{name} must be a positive integer; defaulting to {default}")
        return default
    if parsed <= 0:
        log.warning(f"{name} must be > 0 (got {parsed}); defaulting to {default}")
        return default
    return parsed


def _bool(value: Any, default: bool, name: str) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    log.warning(f"{name} must be boolean; defaulting to {default}")
    return default


def _log_level(value: Any) -> str:
    if value is None:
        return "INFO"
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        log.warning(f"log_level '{value}' is not one of {sorted(LOG_LEVELS)}; defaulting to INFO")
        return "INFO"
    return level


def _validate(raw: Dict[str, Any]) -> None:
    validator = Draft7Validator(CONFIG_SCHEMA)
    errors = sorted(validator.iter_errors(raw), key=lambda e: list(e.path))
    for err in errors:
        loc = "/".join(str(p) for p in err.path)
        log.warning(f"config validation warning at '{loc}': {err.message}")


def _load_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        log.warning(f"Announcement config not found at {path}; using defaults")
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            log.warning("Announcement config root is not an object; ignoring")
    except (OSError, ValueError) as e:
        log.warning(f"Failed to load announcement config ({e}); using defaults")

    return {}


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------

def parse_announcement_config(raw: Optional[Dict[str, Any]]) -> AnnouncementConfig:
    if not isinstance(raw, dict):
        return AnnouncementConfig()

    _validate(raw)

    rotation = RotationConfig(
        interval_seconds=_positive_int(
            _get(raw, "interval_seconds", "IntervalSeconds"),
            DEFAULT_INTERVAL_SECONDS,
            "interval_seconds",
        ),
        randomized=_bool(
            _get(raw, "enable_randomization", "EnableRandomization"),
            False,
            "enable_randomization",
        ),
    )

    version = _get(raw, "version", "Version")

    return AnnouncementConfig(
        rotation=rotation,
        center_width=_positive_int(
            _get(raw, "center_width", "CenterWidth"),
            DEFAULT_CENTER_WIDTH,
            "center_width",
        ),
        create_example_messages=_bool(
            _get(raw, "create_example_messages", "CreateExampleMessages"),
            True,
            "create_example_messages",
        ),
        log_level=_log_level(_get(raw, "log_level", "LogLevel")),
        version=version if isinstance(version, int) and not isinstance(version, bool) else 1,
    )


def apply_env_overrides(cfg: AnnouncementConfig) -> AnnouncementConfig:
    """Apply ROTACAST_* environment overrides on top of the file values."""
    interval = cfg.rotation.interval_seconds
    randomized = cfg.rotation.randomized

    interval_override = os.getenv("ROTACAST_INTERVAL_SECONDS")
    if interval_override:
        interval = _positive_int(interval_override, interval, "ROTACAST_INTERVAL_SECONDS")

    random_override = os.getenv("ROTACAST_RANDOMIZED")
    if random_override is not None:
        randomized = random_override.lower() in {"1", "true", "yes", "on"}

    width_override = os.getenv("ROTACAST_CENTER_WIDTH")
    if width_override:
        cfg.center_width = _positive_int(width_override, cfg.center_width, "ROTACAST_CENTER_WIDTH")

    level_override = os.getenv("ROTACAST_LOG_LEVEL")
    if level_override:
        cfg.log_level = _log_level(level_override)

    cfg.rotation = RotationConfig(interval_seconds=interval, randomized=randomized)
    return cfg


def load_announcement_config(path: Path, *, create_missing: bool = True) -> AnnouncementConfig:
    """
    Load config.json, falling back to defaults for anything invalid.

    When the file does not exist the defaults are written there so operators
    have something to edit.
    """
    path = Path(path)
    existed = path.exists()
    cfg = parse_announcement_config(_load_json(path))

    if not existed and create_missing:
        save_announcement_config(path, cfg)

    return apply_env_overrides(cfg)


def save_announcement_config(path: Path, cfg: AnnouncementConfig) -> None:
    """Write the config atomically so a watcher never reads half a file."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", dir=path.parent, delete=False, encoding="utf-8", suffix=".tmp"
        ) as tmp:
            json.dump(cfg.to_dict(), tmp, indent=2)
            tmp.flush()
            os.fsync(tmp.fileno())
            temp_path = Path(tmp.name)

        temp_path.replace(path)
        log.info(f"Announcement config written to {path}")
    except OSError as e:
        log.error(f"Failed to write announcement config: {e}")


__all__ = [
    "RotationConfig",
    "AnnouncementConfig",
    "parse_announcement_config",
    "apply_env_overrides",
    "load_announcement_config",
    "save_announcement_config",
]
