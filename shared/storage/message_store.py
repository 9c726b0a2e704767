"""
In-memory store of the messages eligible for rotation.

The working set is an immutable snapshot swapped in one assignment on every
reload, so a tick running on the scheduler thread always sees either the
old set or the new one, never a mix.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from shared.announcements.models import AnnouncementMessage
from shared.logging.logger import get_logger

log = get_logger("shared.storage.message_store")


@dataclass(frozen=True)
class _Snapshot:
    # rotation order: enabled only, priority descending
    messages: Tuple[AnnouncementMessage, ...] = ()
    # every loaded message by name, disabled ones included
    catalog: Mapping[str, AnnouncementMessage] = field(
        default_factory=lambda: MappingProxyType({})
    )


class MessageStore:
    def __init__(
        self,
        messages: Optional[Iterable[AnnouncementMessage]] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._snapshot = _Snapshot()
        self._rng = rng or random.Random()
        if messages is not None:
            self.replace_all(messages)

    # ------------------------------------------------------------
    # Reload
    # ------------------------------------------------------------

    def replace_all(self, raw_messages: Iterable[AnnouncementMessage]) -> None:
        """
        Replace the working set.

        Disabled messages are dropped from rotation; the rest are ordered by
        priority, highest first, keeping discovery order on ties.
        """
        loaded = list(raw_messages)
        enabled = [m for m in loaded if m.enabled]
        # list.sort is stable with reverse=True as well
        enabled.sort(key=lambda m: m.priority, reverse=True)

        catalog = {m.name: m for m in loaded if m.name}

        self._snapshot = _Snapshot(
            messages=tuple(enabled),
            catalog=MappingProxyType(catalog),
        )

        skipped = len(loaded) - len(enabled)
        log.info(
            f"Message store updated: {len(enabled)} in rotation"
            + (f", {skipped} disabled" if skipped else "")
        )

    # ------------------------------------------------------------
    # Rotation queries
    # ------------------------------------------------------------

    def count(self) -> int:
        return len(self._snapshot.messages)

    def messages(self) -> Tuple[AnnouncementMessage, ...]:
        return self._snapshot.messages

    def random_pick(self) -> Optional[AnnouncementMessage]:
        messages = self._snapshot.messages
        if not messages:
            return None
        return self._rng.choice(messages)

    def sequential_pick(self, cursor: int) -> Optional[AnnouncementMessage]:
        messages = self._snapshot.messages
        if not messages:
            return None
        return messages[cursor % len(messages)]

    # ------------------------------------------------------------
    # Lookup (manual announce)
    # ------------------------------------------------------------

    def get(self, name: str) -> Optional[AnnouncementMessage]:
        """Find a loaded message by name, with or without a .json suffix."""
        if not name:
            return None
        key = name.replace("\\", "/")
        if key.lower().endswith(".json"):
            key = key[:-5]
        return self._snapshot.catalog.get(key)

    def names(self) -> List[str]:
        return sorted(self._snapshot.catalog)


__all__ = ["MessageStore"]
