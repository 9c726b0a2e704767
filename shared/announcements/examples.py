"""Example message templates written into messages/example/ on first run."""

from __future__ import annotations

from typing import Any, Dict

EXAMPLE_MESSAGES: Dict[str, Dict[str, Any]] = {
    "example.json": {
        "chat_messages": [
            "&6&l=== Server Announcement ===",
            "&eWelcome to the server!",
            "&7Type &a/help&7 for a list of commands.",
        ],
        "center": True,
        "priority": 0,
        "enabled": True,
    },
    "example-chat.json": {
        "chat_messages": [
            "<color:gold><b>Tip of the day</b>",
            "<offset:-2>&bJoin our Discord to stay up to date!",
            "&#FF8800Hex colors work too.",
        ],
        "enabled": False,
    },
    "example-notification.json": {
        "notification": {
            "title": "&aDouble XP weekend!",
            "subtitle": "&7All weekend long",
            "icon": None,
        },
        "enabled": False,
    },
    "example-title.json": {
        "title": {
            "title": "&6Welcome",
            "subtitle": "&eEnjoy your stay",
            "is_major": True,
            "fade_in": 0.25,
            "stay": 5.0,
            "fade_out": 0.25,
        },
        "enabled": False,
    },
    "example-sound.json": {
        "sound": {
            "sound_name": "SFX_Discovery_Z1_Short",
            "volume": 1.0,
            "pitch": 1.0,
        },
        "enabled": False,
    },
    "example-all.json": {
        "chat_messages": [
            "&c&lMaintenance",
            "&7The server restarts in &e10 minutes&7.",
        ],
        "notification": {
            "title": "&cMaintenance",
            "subtitle": "&7Restart in 10 minutes",
        },
        "title": {
            "title": "Maintenance",
            "subtitle": "Restart in 10 minutes",
            "is_major": False,
        },
        "sound": {"sound_name": "SFX_Alert", "volume": 0.8, "pitch": 1.0},
        "priority": 10,
        "enabled": False,
    },
    "example-no-center.json": {
        "chat_messages": [
            "&7[&bInfo&7] &fThis line is sent as written.",
        ],
        "center": False,
        "enabled": False,
    },
}

__all__ = ["EXAMPLE_MESSAGES"]
