"""View models consumed by renderers."""

from .page import (
    GlyphLine,
    PageView,
    carriage_offset,
    paper_offset,
    present,
    style_runs,
)
from .scroll import SCROLL_FACTOR, SCROLL_LIMIT, PaperScroll

__all__ = [
    "GlyphLine",
    "PageView",
    "carriage_offset",
    "paper_offset",
    "present",
    "style_runs",
    "PaperScroll",
    "SCROLL_FACTOR",
    "SCROLL_LIMIT",
]
