import logging
import os
from datetime import datetime
from pathlib import Path

LOG_DIR = Path(os.getenv("ROTACAST_LOG_DIR", "logs"))
LOG_DIR.mkdir(parents=True, exist_ok=True)

_LOGGERS = {}

# NONE is not a stdlib level; it silences everything
_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "NONE": logging.CRITICAL + 1,
}

_current_level = logging.DEBUG


def get_logger(
    name: str,
    *,
    runtime: str = "rotacast",
) -> logging.Logger:
    """
    Create or retrieve a named logger.

    Parameters:
    - name: logger namespace (e.g. core.scheduler, services.twitch)
    - runtime: log file prefix (one file per runtime per run)
    """
    cache_key = f"{runtime}:{name}"
    if cache_key in _LOGGERS:
        return _LOGGERS[cache_key]

    logger = logging.getLogger(cache_key)
    logger.setLevel(_current_level)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    # ------------------------------
    # Console handler
    # ------------------------------
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    # ------------------------------
    # File handler (one per run)
    # ------------------------------
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    logfile = LOG_DIR / f"{runtime}-{timestamp}.log"

    file_handler = logging.FileHandler(logfile, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logger.propagate = False
    _LOGGERS[cache_key] = logger

    return logger


def set_log_level(level: str) -> str:
    """
    Apply a configured level name to every logger, existing and future.

    Accepts DEBUG | INFO | WARNING | ERROR | NONE (case-insensitive).
    Unknown names fall back to INFO. Returns the level name applied.
    """
    global _current_level

    name = (level or "").strip().upper()
    resolved = _LEVELS.get(name)
    if resolved is None:
        name = "INFO"
        resolved = logging.INFO

    _current_level = resolved
    for logger in _LOGGERS.values():
        logger.setLevel(resolved)

    if name != (level or "").strip().upper():
        get_logger("shared.logging").warning(
            f"Unknown log level '{level}'; using INFO"
        )

    return name
