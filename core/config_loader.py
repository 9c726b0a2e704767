"""
Message file loader.

Discovers every ``*.json`` file under the messages directory (recursively),
validates it against the message schema and turns it into an
``AnnouncementMessage``. Failures are logged per file and never abort the
load, so one broken file cannot take the whole rotation down.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from shared.announcements.examples import EXAMPLE_MESSAGES
from shared.announcements.models import AnnouncementMessage
from shared.announcements.schema import MESSAGE_SCHEMA
from shared.logging.logger import get_logger

log = get_logger("core.config_loader")


class MessageLoader:
    EXAMPLE_DIR = "example"

    def __init__(self, messages_dir: Path) -> None:
        self.messages_dir = Path(messages_dir)
        self._validator = Draft7Validator(MESSAGE_SCHEMA)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _name_for(self, path: Path) -> str:
        relative = path.relative_to(self.messages_dir).as_posix()
        return relative[: -len(path.suffix)] if path.suffix else relative

    def _load_json(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning(f"Failed to read message file {path}: {e}")
            return None

        if not isinstance(data, dict):
            log.warning(f"Message file {path} root is not an object; skipping")
            return None

        return data

    def validation_errors(self, payload: Dict[str, Any]) -> List[str]:
        errors = sorted(self._validator.iter_errors(payload), key=lambda e: list(e.path))
        return [
            f"'{'/'.join(str(p) for p in err.path)}': {err.message}"
            for err in errors
        ]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def discover(self) -> List[Path]:
        """All message files, in a stable (sorted) discovery order."""
        if not self.messages_dir.is_dir():
            log.warning(f"Messages directory not found at {self.messages_dir}")
            return []

        return sorted(
            p for p in self.messages_dir.rglob("*")
            if p.is_file() and p.suffix.lower() == ".json"
        )

    def load_file(self, path: Path) -> Optional[AnnouncementMessage]:
        path = Path(path)
        name = self._name_for(path)

        data = self._load_json(path)
        if data is None:
            return None

        for problem in self.validation_errors(data):
            log.warning(f"[{name}] validation warning at {problem}")

        return AnnouncementMessage.from_dict(data, name=name)

    def load(self) -> List[AnnouncementMessage]:
        """
        Load every message file, disabled ones included.

        Filtering and ordering belong to the message store.
        """
        paths = self.discover()
        log.info(f"Loading {len(paths)} message file(s) from {self.messages_dir}")

        messages: List[AnnouncementMessage] = []
        for path in paths:
            message = self.load_file(path)
            if message is None:
                continue

            messages.append(message)
            if message.enabled:
                log.debug(f"Loaded message: {message.name}")
            else:
                log.debug(f"Loaded disabled message: {message.name}")

        log.info(f"Successfully loaded {len(messages)} message(s)")
        return messages

    def load_one(self, name: str) -> Optional[AnnouncementMessage]:
        """Re-read a single message by name (``.json`` suffix optional)."""
        key = name.replace("\\", "/")
        if not key.lower().endswith(".json"):
            key = f"{key}.json"

        path = (self.messages_dir / key).resolve()
        root = self.messages_dir.resolve()
        if root not in path.parents or not path.is_file():
            return None

        return self.load_file(self.messages_dir / key)

    def create_example_templates(self) -> List[Path]:
        """
        Write the bundled example files into messages/example/.

        Existing files are left alone so operator edits survive restarts.
        """
        example_dir = self.messages_dir / self.EXAMPLE_DIR
        try:
            example_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            log.warning(f"Failed to create example directory: {e}")
            return []

        created: List[Path] = []
        for file_name, payload in EXAMPLE_MESSAGES.items():
            target = example_dir / file_name
            if target.exists():
                continue
            try:
                target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            except OSError as e:
                log.warning(f"Failed to write example template {file_name}: {e}")
                continue
            created.append(target)
            log.info(f"Created example message template: {target}")

        return created


__all__ = ["MessageLoader"]
