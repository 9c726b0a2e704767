"""
Announcement file validation script.

Checks config.json and every message file under messages/ against the
JSON schemas. Validation only: nothing is written, nothing is started.

Usage:
    python scripts/validate_messages.py --data-dir data
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from core.config_loader import MessageLoader
from shared.announcements.schema import CONFIG_SCHEMA


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------

def _load_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ValueError(f"{path}: invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise ValueError(f"{path}: root JSON value must be an object")
    return data


def _error(msg: str):
    print(f"[VALIDATION ERROR] {msg}", file=sys.stderr)


# ------------------------------------------------------------
# Validators
# ------------------------------------------------------------

def validate_config(path: Path) -> bool:
    if not path.exists():
        print(f"{path} not found; defaults will be used")
        return True

    try:
        data = _load_json(path)
    except ValueError as e:
        _error(str(e))
        return False

    ok = True
    for err in Draft7Validator(CONFIG_SCHEMA).iter_errors(data):
        loc = "/".join(str(p) for p in err.path)
        _error(f"{path.name}: '{loc}': {err.message}")
        ok = False
    return ok


def validate_messages(messages_dir: Path) -> bool:
    loader = MessageLoader(messages_dir)
    paths = loader.discover()
    ok = True

    for path in paths:
        try:
            data = _load_json(path)
        except ValueError as e:
            _error(str(e))
            ok = False
            continue

        problems: List[str] = loader.validation_errors(data)
        for problem in problems:
            _error(f"{path.relative_to(messages_dir).as_posix()}: {problem}")
        if problems:
            ok = False

    print(f"Checked {len(paths)} message file(s) under {messages_dir}")
    return ok


# ------------------------------------------------------------
# Entry point
# ------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate announcement config and messages")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path(os.getenv("ROTACAST_DATA_DIR", "data")),
        help="Directory holding config.json and messages/ (default: data)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    data_dir: Path = args.data_dir

    ok = validate_config(data_dir / "config.json")
    if not validate_messages(data_dir / "messages"):
        ok = False

    if not ok:
        print("Announcement validation failed.", file=sys.stderr)
        return 1

    print("Announcement validation passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
