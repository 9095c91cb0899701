"""Column/line bookkeeping derived by replaying a stream."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .units import CharUnit, LineBreakUnit, RawStream


@dataclass(frozen=True, slots=True)
class Caret:
    """Carriage position: visible characters on the line, and line index."""

    column: int = 0
    line: int = 0


def _clamp_index(stream: RawStream, index: Optional[int]) -> int:
    if index is None:
        return len(stream)
    return max(0, min(index, len(stream)))


def column_and_line_at(stream: RawStream, index: Optional[int] = None) -> Caret:
    """Replay ``stream[:index]`` (whole stream by default).

    Markers occupy no width; every line break starts a new line at column 0.
    """

    end = _clamp_index(stream, index)
    column = 0
    line = 0
    for position in range(end):
        unit = stream[position]
        if isinstance(unit, LineBreakUnit):
            line += 1
            column = 0
        elif isinstance(unit, CharUnit):
            column += 1
    return Caret(column=column, line=line)


def line_count(stream: RawStream) -> int:
    return 1 + sum(1 for unit in stream if isinstance(unit, LineBreakUnit))


def line_start(stream: RawStream, index: Optional[int] = None) -> int:
    """Index of the first unit on the line containing ``index``."""

    end = _clamp_index(stream, index)
    for position in range(end - 1, -1, -1):
        if isinstance(stream[position], LineBreakUnit):
            return position + 1
    return 0


def is_line_full(column: int, columns_per_line: int) -> bool:
    return column >= columns_per_line


__all__ = [
    "Caret",
    "column_and_line_at",
    "line_count",
    "line_start",
    "is_line_full",
]
