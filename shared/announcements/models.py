"""Announcement message model and its file-format parsing."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

from shared.logging.logger import get_logger

log = get_logger("shared.announcements.models")


# ------------------------------------------------------------
# Field helpers
# ------------------------------------------------------------

def _pick(raw: Dict[str, Any], *keys: str) -> Any:
    """First non-null value among keys (snake_case first, legacy aliases after)."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _as_bool(value: Any, default: bool, name: str) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    log.warning(f"'{name}' must be boolean; defaulting to {default}")
    return default


def _as_float(value: Any, default: float, name: str) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        log.warning(f"'{name}' must be a number; defaulting to {default}")
        return default
    try:
        return float(value)
    except ValueError:
        log.warning(f"'{name}' must be a number; defaulting to {default}")
        return default


def _as_int(value: Any, default: int, name: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        log.warning(f"'{name}' must be an integer; defaulting to {default}")
        return default
    try:
        return int(value)
    except ValueError:
        log.warning(f"'{name}' must be an integer; defaulting to {default}")
        return default


# ------------------------------------------------------------
# Payload parts
# ------------------------------------------------------------

@dataclass(frozen=True)
class NotificationSpec:
    title: str = ""
    subtitle: str = ""
    icon: Optional[str] = None

    @property
    def has_icon(self) -> bool:
        return bool(self.icon)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "NotificationSpec":
        icon = _pick(raw, "icon", "Icon")
        return cls(
            title=_as_str(_pick(raw, "title", "Title")),
            subtitle=_as_str(_pick(raw, "subtitle", "Subtitle")),
            icon=str(icon) if icon else None,
        )


@dataclass(frozen=True)
class TitleSpec:
    title: str = ""
    subtitle: str = ""
    is_major: bool = False
    fade_in: float = 0.25
    stay: float = 5.0
    fade_out: float = 0.25

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TitleSpec":
        return cls(
            title=_as_str(_pick(raw, "title", "Title")),
            subtitle=_as_str(_pick(raw, "subtitle", "Subtitle")),
            is_major=_as_bool(_pick(raw, "is_major", "IsMajor"), False, "title.is_major"),
            fade_in=_as_float(_pick(raw, "fade_in", "FadeIn"), 0.25, "title.fade_in"),
            stay=_as_float(_pick(raw, "stay", "Stay"), 5.0, "title.stay"),
            fade_out=_as_float(_pick(raw, "fade_out", "FadeOut"), 0.25, "title.fade_out"),
        )


@dataclass(frozen=True)
class SoundSpec:
    name: str = ""
    volume: float = 1.0
    pitch: float = 1.0

    @property
    def playable(self) -> bool:
        return bool(self.name)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SoundSpec":
        return cls(
            name=_as_str(_pick(raw, "sound_name", "name", "SoundName")),
            volume=_as_float(_pick(raw, "volume", "Volume"), 1.0, "sound.volume"),
            pitch=_as_float(_pick(raw, "pitch", "Pitch"), 1.0, "sound.pitch"),
        )


# ------------------------------------------------------------
# Message
# ------------------------------------------------------------

@dataclass(frozen=True)
class AnnouncementMessage:
    """
    One pre-authored announcement.

    A message may carry any mix of chat lines, a notification, a title and a
    sound. One with none of them is valid and simply has no visible effect.
    Priority orders messages inside the rotation; it has no effect within a
    single broadcast.
    """

    name: str = ""
    chat_lines: Tuple[str, ...] = field(default_factory=tuple)
    center_chat: bool = True
    notification: Optional[NotificationSpec] = None
    title: Optional[TitleSpec] = None
    sound: Optional[SoundSpec] = None
    priority: int = 0
    enabled: bool = True

    @property
    def has_chat(self) -> bool:
        return bool(self.chat_lines)

    @property
    def has_payload(self) -> bool:
        return bool(
            self.chat_lines
            or self.notification is not None
            or self.title is not None
            or self.sound is not None
        )

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], *, name: str = "") -> "AnnouncementMessage":
        """
        Build a message from a decoded message file.

        Wrong-typed fields are logged and fall back to their defaults; the
        message itself is always produced.
        """
        chat_raw = _pick(raw, "chat_messages", "ChatMessages")
        chat_lines: Tuple[str, ...] = ()
        if isinstance(chat_raw, list):
            chat_lines = tuple("" if line is None else str(line) for line in chat_raw)
        elif chat_raw is not None:
            log.warning(f"[{name}] 'chat_messages' must be a list; ignoring")

        return cls(
            name=name,
            chat_lines=chat_lines,
            center_chat=_as_bool(_pick(raw, "center", "Center"), True, "center"),
            notification=cls._section(raw, name, NotificationSpec, "notification", "Notification"),
            title=cls._section(raw, name, TitleSpec, "title", "Title"),
            sound=cls._section(raw, name, SoundSpec, "sound", "Sound"),
            priority=_as_int(_pick(raw, "priority", "Priority"), 0, "priority"),
            enabled=_as_bool(_pick(raw, "enabled", "Enabled"), True, "enabled"),
        )

    @staticmethod
    def _section(raw: Dict[str, Any], name: str, spec_cls, *keys: str):
        value = _pick(raw, *keys)
        if value is None:
            return None
        if not isinstance(value, dict):
            log.warning(f"[{name}] '{keys[0]}' must be an object; ignoring")
            return None
        return spec_cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["chat_lines"] = list(self.chat_lines)
        return payload


__all__ = [
    "AnnouncementMessage",
    "NotificationSpec",
    "TitleSpec",
    "SoundSpec",
]
