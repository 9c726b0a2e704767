"""
JSON Schemas (Draft 7) for the announcement config and message files.

Unknown keys are allowed so the legacy PascalCase aliases keep validating.
"""

from __future__ import annotations

from typing import Any, Dict

_NUMBER = {"type": "number"}
_TEXT = {"type": "string"}

MESSAGE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Announcement message",
    "type": "object",
    "properties": {
        "chat_messages": {
            "type": "array",
            "items": {"type": ["string", "null"]},
        },
        "center": {"type": "boolean"},
        "priority": {"type": "integer"},
        "enabled": {"type": "boolean"},
        "notification": {
            "type": "object",
            "properties": {
                "title": _TEXT,
                "subtitle": _TEXT,
                "icon": {"type": ["string", "null"]},
            },
        },
        "title": {
            "type": "object",
            "properties": {
                "title": _TEXT,
                "subtitle": _TEXT,
                "is_major": {"type": "boolean"},
                "fade_in": _NUMBER,
                "stay": _NUMBER,
                "fade_out": _NUMBER,
            },
        },
        "sound": {
            "type": "object",
            "properties": {
                "sound_name": _TEXT,
                "volume": _NUMBER,
                "pitch": _NUMBER,
            },
        },
    },
}

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Announcement config",
    "type": "object",
    "properties": {
        "interval_seconds": {"type": "integer", "exclusiveMinimum": 0},
        "enable_randomization": {"type": "boolean"},
        "create_example_messages": {"type": "boolean"},
        "center_width": {"type": "integer", "exclusiveMinimum": 0},
        "log_level": {"type": "string"},
        "version": {"type": "integer"},
    },
}

__all__ = ["MESSAGE_SCHEMA", "CONFIG_SCHEMA"]
