"""Content hashing used to notice edits to config and message files."""
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable, Optional

from shared.logging.logger import get_logger

log = get_logger("shared.utils.hashing")


def stable_hash_for_paths(paths: Iterable[Path]) -> Optional[str]:
    """Compute a deterministic hash over a set of files.

    Paths are hashed in sorted order so directory walk order does not matter.
    Missing files contribute a placeholder token so that creating one later
    shows up as a change. Returns ``None`` when every file is missing.
    """

    digest = hashlib.sha256()
    seen = False

    for path in sorted(Path(p) for p in paths):
        digest.update(str(path).encode("utf-8"))
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            digest.update(b"<missing>")
            continue
        except OSError as exc:
            log.warning(f"Failed to hash path {path}: {exc}")
            digest.update(f"<error:{exc}>".encode("utf-8"))
            continue

        seen = True
        digest.update(data)

    if not seen:
        return None

    return digest.hexdigest()
