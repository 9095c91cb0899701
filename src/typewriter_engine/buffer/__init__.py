"""Typewriter page buffer, stream units, and line metrics."""

from .metrics import Caret, column_and_line_at, is_line_full, line_count, line_start
from .typewriter import (
    DEFAULT_COLUMNS_PER_LINE,
    BufferSnapshot,
    Transaction,
    TypewriterBuffer,
    glyph_text,
)
from .units import (
    LINE_BOUNDARY,
    LINE_BREAK,
    SENTINEL,
    CharUnit,
    Glyph,
    InkStyle,
    LineBreakUnit,
    RawStream,
    StreamUnit,
    StyleSwitchUnit,
    decode,
    decode_glyph_lines,
    dumps_stream,
    effective_style,
    encode_switch,
    loads_stream,
)
from .validation import BufferValidationError, ensure_typable

__all__ = [
    "Caret",
    "column_and_line_at",
    "is_line_full",
    "line_count",
    "line_start",
    "DEFAULT_COLUMNS_PER_LINE",
    "BufferSnapshot",
    "Transaction",
    "TypewriterBuffer",
    "glyph_text",
    "LINE_BOUNDARY",
    "LINE_BREAK",
    "SENTINEL",
    "CharUnit",
    "Glyph",
    "InkStyle",
    "LineBreakUnit",
    "RawStream",
    "StreamUnit",
    "StyleSwitchUnit",
    "decode",
    "decode_glyph_lines",
    "dumps_stream",
    "effective_style",
    "encode_switch",
    "loads_stream",
    "BufferValidationError",
    "ensure_typable",
]
