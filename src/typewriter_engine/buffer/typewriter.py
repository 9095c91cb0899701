"""The typewriter page buffer: a flat unit stream plus the current ink."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, List, Optional, Tuple

from typewriter_engine.runtime import telemetry

from .metrics import Caret, column_and_line_at, is_line_full, line_count, line_start
from .units import (
    LINE_BREAK,
    CharUnit,
    Glyph,
    InkStyle,
    LineBreakUnit,
    StreamUnit,
    StyleSwitchUnit,
    decode,
    dumps_stream,
    effective_style,
    loads_stream,
)
from .validation import ensure_typable

DEFAULT_COLUMNS_PER_LINE = 30


@dataclass(frozen=True, slots=True)
class BufferSnapshot:
    """Immutable copy of the buffer handed to presentation and archive code."""

    version: int
    stream: Tuple[StreamUnit, ...]
    style: InkStyle
    caret: Caret
    columns_per_line: int

    @property
    def raw_content(self) -> str:
        return dumps_stream(self.stream)


class TypewriterBuffer:
    """Append-only (except backspace) page being typed.

    Caret column and line are derived from the stream; the cached ``caret``
    is recomputed when every transaction commits.
    """

    def __init__(
        self,
        *,
        name: str = "page",
        columns_per_line: int = DEFAULT_COLUMNS_PER_LINE,
        stream: Optional[List[StreamUnit]] = None,
    ) -> None:
        if columns_per_line < 1:
            raise ValueError("columns_per_line must be positive")
        self.name = name
        self.columns_per_line = columns_per_line
        self._stream: List[StreamUnit] = list(stream or [])
        self._style = effective_style(self._stream)
        self._toggle_pending = False
        self._caret = column_and_line_at(self._stream)
        self.version = 0

    @classmethod
    def from_raw(
        cls, text: str, *, name: str = "page", columns_per_line: int = DEFAULT_COLUMNS_PER_LINE
    ) -> "TypewriterBuffer":
        return cls(
            name=name, columns_per_line=columns_per_line, stream=list(loads_stream(text))
        )

    # -- read side ---------------------------------------------------------

    @property
    def stream(self) -> Tuple[StreamUnit, ...]:
        return tuple(self._stream)

    @property
    def style(self) -> InkStyle:
        return self._style

    @property
    def caret(self) -> Caret:
        return self._caret

    @property
    def line_count(self) -> int:
        return line_count(self._stream)

    @property
    def raw_content(self) -> str:
        return dumps_stream(self._stream)

    @property
    def is_empty(self) -> bool:
        return not self._stream

    @property
    def is_blank(self) -> bool:
        """True when nothing but whitespace has been typed."""

        return not any(
            isinstance(unit, CharUnit) and not unit.char.isspace()
            for unit in self._stream
        )

    def snapshot(self) -> BufferSnapshot:
        return BufferSnapshot(
            version=self.version,
            stream=self.stream,
            style=self._style,
            caret=self._caret,
            columns_per_line=self.columns_per_line,
        )

    def glyph_count(self) -> int:
        return sum(1 for unit in self._stream if isinstance(unit, CharUnit))

    # -- mutations ---------------------------------------------------------

    def append_character(self, char: str) -> Caret:
        ensure_typable(char)
        with Transaction(self, "append_character") as tx:
            if self._stream and isinstance(self._stream[-1], StyleSwitchUnit):
                # A switch left dangling by backspace is re-decided below.
                self._stream.pop()
            if is_line_full(self._caret.column, self.columns_per_line):
                self._stream.append(LINE_BREAK)
                tx.note("auto_wrap", True)
            if self._style != effective_style(self._stream):
                self._stream.append(StyleSwitchUnit(self._style))
                tx.note("style_switch", self._style.value)
            self._stream.append(CharUnit(char))
        return self._caret

    def append_line_break(self) -> Caret:
        with Transaction(self, "append_line_break"):
            if self._stream and isinstance(self._stream[-1], StyleSwitchUnit):
                self._stream.pop()
            self._stream.append(LINE_BREAK)
        return self._caret

    def backspace(self) -> Caret:
        if self._toggle_pending:
            self._style = effective_style(self._stream)
            self._toggle_pending = False
            telemetry.record_event(
                "buffer.toggle_reverted",
                level="debug",
                data={"buffer": self.name, "style": self._style.value},
            )
            return self._caret
        if not self._stream:
            return self._caret

        with Transaction(self, "backspace") as tx:
            removed = self._stream.pop()
            if isinstance(removed, StyleSwitchUnit):
                tx.note("removed", "style_switch")
            elif isinstance(removed, LineBreakUnit):
                tx.note("removed", "line_break")
            else:
                tx.note("removed", "char")
        return self._caret

    def set_style(self, style: InkStyle | str) -> InkStyle:
        """Change the ink for the next character; the stream is untouched."""

        self._style = InkStyle(style)
        self._toggle_pending = self._style != effective_style(self._stream)
        telemetry.record_event(
            "buffer.style",
            level="debug",
            data={"buffer": self.name, "style": self._style.value},
        )
        return self._style

    def toggle_style(self) -> InkStyle:
        return self.set_style(self._style.toggled())

    def reset(self) -> None:
        with Transaction(self, "reset"):
            self._stream.clear()
            self._style = InkStyle.DEFAULT

    def replay(self, text: str) -> Caret:
        """Type ``text`` as keystrokes, ``\\n`` acting as carriage return."""

        for char in text:
            if char == "\n":
                self.append_line_break()
            else:
                self.append_character(char)
        return self._caret

    def _commit(self) -> None:
        self.version += 1
        self._toggle_pending = False
        self._caret = _trailing_caret(self._stream)

    def __len__(self) -> int:
        return len(self._stream)

    def __repr__(self) -> str:
        return (
            f"TypewriterBuffer(name={self.name!r}, units={len(self._stream)}, "
            f"caret={self._caret}, style={self._style.value})"
        )


class Transaction(AbstractContextManager["Transaction"]):
    """Wraps one buffer mutation in a telemetry span and commits derived state."""

    def __init__(self, buffer: TypewriterBuffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._handle: Optional[telemetry.SpanHandle] = None
        self._units_before = 0

    def __enter__(self) -> "Transaction":
        self._units_before = len(self.buffer)
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name},
        )
        self._handle = self._span_cm.__enter__()
        return self

    def note(self, key: str, value: object) -> None:
        if self._handle is not None:
            self._handle.add_metadata(key, value)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.buffer._commit()
            self.note("units_delta", len(self.buffer) - self._units_before)
            self.note("caret", (self.buffer.caret.line, self.buffer.caret.column))
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


def _trailing_caret(stream: List[StreamUnit]) -> Caret:
    # Column comes from replaying only the final line.
    start = line_start(stream)
    return Caret(
        column=column_and_line_at(stream[start:]).column,
        line=line_count(stream) - 1,
    )


def glyph_text(stream: Tuple[StreamUnit, ...]) -> str:
    """Plain text of a stream with markers dropped."""

    return "".join(
        item.char if isinstance(item, Glyph) else "\n" for item in decode(stream)
    )


__all__ = [
    "DEFAULT_COLUMNS_PER_LINE",
    "BufferSnapshot",
    "TypewriterBuffer",
    "Transaction",
    "glyph_text",
]
