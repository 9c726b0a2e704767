from shared.markup.centering import DEFAULT_CENTER_WIDTH, CenteringPolicy, center
from shared.markup.translator import (
    extract_offset,
    first_color,
    parse_color,
    strip_all_markup,
    strip_offset_directives,
    translate_legacy_to_canonical,
    visible_width,
)

__all__ = [
    "DEFAULT_CENTER_WIDTH",
    "CenteringPolicy",
    "center",
    "extract_offset",
    "first_color",
    "parse_color",
    "strip_all_markup",
    "strip_offset_directives",
    "translate_legacy_to_canonical",
    "visible_width",
]
