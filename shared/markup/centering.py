"""Fixed-width centering for chat lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from shared.markup.translator import (
    extract_offset,
    strip_offset_directives,
    translate_legacy_to_canonical,
    visible_width,
)

DEFAULT_CENTER_WIDTH = 80


def center(text: str, target_width: int = DEFAULT_CENTER_WIDTH, offset: int = 0) -> str:
    """
    Prefix text with enough spaces to center it in target_width columns.

    Markup does not count toward width and is left in place. The signed
    offset shifts the result right (positive) or left (negative); the
    padding never goes below zero.
    """
    text = text or ""
    spaces = (target_width - visible_width(text)) // 2 + offset
    return " " * max(0, spaces) + text


@dataclass(frozen=True)
class CenteringPolicy:
    target_width: int = DEFAULT_CENTER_WIDTH

    def center(self, text: str, offset: int = 0) -> str:
        return center(text, self.target_width, offset)

    def render_line(self, line: str, *, centered: bool = True) -> str:
        """
        Turn one authored chat line into its display form.

        The offset directive is read and stripped before anything else, then
        legacy codes become canonical tags, then the line is centered. With
        centering off the offset has nothing to adjust and is dropped.
        """
        offset = extract_offset(line)
        line = strip_offset_directives(line)
        line = translate_legacy_to_canonical(line)
        if centered:
            line = self.center(line, offset)
        return line

    def render_lines(
        self, lines: Iterable[Optional[str]], *, centered: bool = True
    ) -> List[str]:
        return [
            self.render_line(line, centered=centered)
            for line in lines
            if line
        ]


__all__ = ["DEFAULT_CENTER_WIDTH", "CenteringPolicy", "center"]
