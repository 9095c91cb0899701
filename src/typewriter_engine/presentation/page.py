"""Pure mapping from a unit stream to what the paper should show."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from typewriter_engine.buffer import (
    Caret,
    Glyph,
    InkStyle,
    StreamUnit,
    column_and_line_at,
    decode_glyph_lines,
)
from typewriter_engine.config import PaperConfig

GlyphLine = Tuple[Glyph, ...]


@dataclass(frozen=True, slots=True)
class PageView:
    """Display lines plus where the carriage and paper sit."""

    lines: Tuple[GlyphLine, ...]
    caret_column: int
    caret_line: int
    carriage_offset: int
    paper_offset: int

    @property
    def caret(self) -> Caret:
        return Caret(column=self.caret_column, line=self.caret_line)

    def text(self) -> str:
        return "\n".join("".join(glyph.char for glyph in line) for line in self.lines)


def carriage_offset(column: int, paper: PaperConfig) -> int:
    """Horizontal shift of the sheet; it slides left one cell per character."""

    return paper.initial_carriage_offset - column * paper.char_width


def paper_offset(line: int, paper: PaperConfig) -> int:
    return line * paper.line_height


def present(stream: Iterable[StreamUnit], paper: PaperConfig | None = None) -> PageView:
    paper = paper or PaperConfig()
    units = tuple(stream)
    caret = column_and_line_at(units)
    lines = tuple(tuple(line) for line in decode_glyph_lines(units))
    return PageView(
        lines=lines,
        caret_column=caret.column,
        caret_line=caret.line,
        carriage_offset=carriage_offset(caret.column, paper),
        paper_offset=paper_offset(caret.line, paper),
    )


def style_runs(line: GlyphLine) -> Tuple[Tuple[str, InkStyle], ...]:
    """Collapse a line into ``(text, style)`` runs for renderers."""

    runs: list[Tuple[str, InkStyle]] = []
    for glyph in line:
        if runs and runs[-1][1] is glyph.style:
            runs[-1] = (runs[-1][0] + glyph.char, glyph.style)
        else:
            runs.append((glyph.char, glyph.style))
    return tuple(runs)


__all__ = [
    "GlyphLine",
    "PageView",
    "carriage_offset",
    "paper_offset",
    "present",
    "style_runs",
]
