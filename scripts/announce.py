"""
Send one announcement immediately, outside the rotation.

Usage:
    python scripts/announce.py example/example-chat --data-dir data

Delivery channels come from the same environment variables the runtime
uses (.env is honored).
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from core.announcer import AnnouncementError, AnnouncementService
from core.app import build_dispatcher


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send an announcement by name")
    parser.add_argument("name", help="Message name, e.g. example/example-chat")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding config.json and messages/ (default: $ROTACAST_DATA_DIR or data)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    data_dir = args.data_dir or Path(os.getenv("ROTACAST_DATA_DIR", "data"))

    service = AnnouncementService(data_dir, build_dispatcher())
    service.load()

    try:
        results = asyncio.run(service.announce(args.name))
    except AnnouncementError as e:
        print(str(e), file=sys.stderr)
        return 1

    failed = [r for r in results if r["status"] != "success"]
    for result in failed:
        print(f"{result['recipient']}: {result.get('error')}", file=sys.stderr)

    if failed:
        print(f"Announcement '{args.name}' failed for {len(failed)} recipient(s).", file=sys.stderr)
        return 1

    print(f"Announcement '{args.name}' sent successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
