"""
Markup translation and measurement for announcement text.

Two inline syntaxes are supported:

- legacy codes: ``&a`` style single-character colors/styles and the two
  escaped hex forms ``&#RRGGBB`` and ``&x&R&R&G&G&B&B``
- canonical tags: ``<color:green>``, ``<color:#RRGGBB>``, ``<b>``,
  ``<i>``, ``<u>``, ``<st>``, ``<obf>``, ``<reset>`` and the non-printing
  ``<offset:N>`` directive

Everything here is pure and synchronous. Malformed input never raises; it
falls back to being treated as literal text.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

RGB = Tuple[int, int, int]

# ------------------------------------------------------------
# Color / style tables
# ------------------------------------------------------------

LEGACY_COLOR_NAMES: Dict[str, str] = {
    "0": "black",
    "1": "dark_blue",
    "2": "dark_green",
    "3": "dark_aqua",
    "4": "dark_red",
    "5": "dark_purple",
    "6": "gold",
    "7": "gray",
    "8": "dark_gray",
    "9": "blue",
    "a": "green",
    "b": "aqua",
    "c": "red",
    "d": "light_purple",
    "e": "yellow",
    "f": "white",
}

LEGACY_STYLE_TAGS: Dict[str, str] = {
    "k": "obf",  # obfuscated
    "l": "b",  # bold
    "m": "st",  # strikethrough
    "n": "u",  # underline
    "o": "i",  # italic
    "r": "reset",
}

NAMED_COLORS: Dict[str, RGB] = {
    "black": (0, 0, 0),
    "dark_blue": (0, 0, 170),
    "dark_green": (0, 170, 0),
    "dark_aqua": (0, 170, 170),
    "dark_red": (170, 0, 0),
    "dark_purple": (170, 0, 170),
    "gold": (255, 170, 0),
    "gray": (170, 170, 170),
    "dark_gray": (85, 85, 85),
    "blue": (85, 85, 255),
    "green": (85, 255, 85),
    "aqua": (85, 255, 255),
    "red": (255, 85, 85),
    "light_purple": (255, 85, 255),
    "yellow": (255, 255, 85),
    "white": (255, 255, 255),
}

_LEGACY_CODES = frozenset(LEGACY_COLOR_NAMES) | frozenset(LEGACY_STYLE_TAGS)

# ------------------------------------------------------------
# Patterns
# ------------------------------------------------------------

_HASH_HEX = re.compile(r"&#([0-9A-Fa-f]{6})")
_X_HEX = re.compile(r"&[xX]((?:&[0-9A-Fa-f]){6})")
_LEGACY_CODE = re.compile(r"&([0-9a-fk-orA-FK-OR])")

_OFFSET_DIRECTIVE = re.compile(r"<offset:([^<>]*)>", re.IGNORECASE)
_OFFSET_VALUE = re.compile(r"[+-]?\d+")

_COLOR_TAG = re.compile(r"<color:([^<>]+)>", re.IGNORECASE)
_HEX_VALUE = re.compile(r"#?([0-9A-Fa-f]{6}|[0-9A-Fa-f]{3})")


# ------------------------------------------------------------
# Legacy -> canonical
# ------------------------------------------------------------

def _legacy_tag(match: re.Match) -> str:
    code = match.group(1).lower()
    color = LEGACY_COLOR_NAMES.get(code)
    if color:
        return f"<color:{color}>"
    return f"<{LEGACY_STYLE_TAGS[code]}>"


def translate_legacy_to_canonical(text: Optional[str]) -> str:
    """
    Rewrite legacy ``&`` codes as canonical tags.

    Hex forms are rewritten first so their digits are never read as
    single-character codes. Unknown ``&`` sequences pass through untouched.
    """
    if not text:
        return ""

    s = _HASH_HEX.sub(lambda m: f"<color:#{m.group(1)}>", text)
    s = _X_HEX.sub(lambda m: f"<color:#{m.group(1).replace('&', '')}>", s)

    if "&" not in s:
        return s

    return _LEGACY_CODE.sub(_legacy_tag, s)


# ------------------------------------------------------------
# Offset directive
# ------------------------------------------------------------

def extract_offset(text: Optional[str]) -> int:
    """
    Return N from the first ``<offset:N>`` directive, or 0.

    Only the first directive on a line counts. A directive whose value is
    not a signed integer yields 0.
    """
    if not text or "offset" not in text.lower():
        return 0

    match = _OFFSET_DIRECTIVE.search(text)
    if not match:
        return 0

    value = match.group(1).strip()
    if not _OFFSET_VALUE.fullmatch(value):
        return 0
    return int(value)


def strip_offset_directives(text: Optional[str]) -> str:
    """Remove every ``<offset:...>`` directive so none is rendered."""
    if not text:
        return ""

    s = text
    while True:
        s, removed = _OFFSET_DIRECTIVE.subn("", s)
        if not removed:
            return s


# ------------------------------------------------------------
# Measurement
# ------------------------------------------------------------

def _legacy_span(text: str, i: int) -> int:
    """Length of the legacy code starting at text[i] ('&'), or 0."""
    if _HASH_HEX.match(text, i):
        return 8
    if _X_HEX.match(text, i):
        return 12
    if text[i + 1].lower() in _LEGACY_CODES:
        return 2
    return 0


def _scan_visible(text: str) -> str:
    out = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch == "<":
            end = text.find(">", i + 1)
            if end != -1:
                i = end + 1
                continue
            # unclosed tag: the '<' is literal

        elif ch == "&" and i + 1 < n:
            span = _legacy_span(text, i)
            if span:
                i += span
                continue

        out.append(ch)
        i += 1

    return "".join(out)


def strip_all_markup(text: Optional[str]) -> str:
    """
    Remove canonical tags, legacy codes and both legacy hex forms.

    The scan is repeated until the text is stable, so leftovers that line up
    into a new code (``&&aa``) are removed as well.
    """
    if not text:
        return ""

    current = text
    while True:
        stripped = _scan_visible(current)
        if stripped == current:
            return stripped
        current = stripped


def visible_width(text: Optional[str]) -> int:
    """Number of characters that take up space on screen."""
    return len(strip_all_markup(text))


# ------------------------------------------------------------
# Colors
# ------------------------------------------------------------

def parse_color(value: Optional[str]) -> Optional[RGB]:
    """
    Parse a color name, ``#RRGGBB``, ``RRGGBB``, ``#RGB`` or ``&c`` code.

    Returns an (r, g, b) tuple, or None when the value is not a color.
    """
    if not value:
        return None

    raw = value.strip()

    if len(raw) == 2 and raw[0] == "&":
        name = LEGACY_COLOR_NAMES.get(raw[1].lower())
        return NAMED_COLORS[name] if name else None

    named = NAMED_COLORS.get(raw.lower())
    if named:
        return named

    match = _HEX_VALUE.fullmatch(raw)
    if not match:
        return None

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return (
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
    )


def first_color(text: Optional[str]) -> Optional[RGB]:
    """RGB of the first color in text (legacy codes are translated first)."""
    if not text:
        return None

    for match in _COLOR_TAG.finditer(translate_legacy_to_canonical(text)):
        rgb = parse_color(match.group(1))
        if rgb:
            return rgb
    return None


__all__ = [
    "LEGACY_COLOR_NAMES",
    "LEGACY_STYLE_TAGS",
    "NAMED_COLORS",
    "translate_legacy_to_canonical",
    "extract_offset",
    "strip_offset_directives",
    "strip_all_markup",
    "visible_width",
    "parse_color",
    "first_color",
]
