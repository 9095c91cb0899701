"""Stream units, ink styles, and the style-marker codec.

A page is one flat sequence of units. Visible characters, line breaks and
ink switches are distinct dataclasses, so typed input can never be mistaken
for a marker. The string form stored in archived notes embeds markers as a
``§`` sentinel followed by a one-character tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Sequence, Tuple, Union


class InkStyle(str, Enum):
    """Binary ink ribbon colour."""

    DEFAULT = "default"
    ACCENT = "accent"

    def toggled(self) -> "InkStyle":
        return InkStyle.ACCENT if self is InkStyle.DEFAULT else InkStyle.DEFAULT


@dataclass(frozen=True, slots=True)
class CharUnit:
    """One visible character."""

    char: str

    def __post_init__(self) -> None:
        if len(self.char) != 1:
            raise ValueError("CharUnit holds exactly one character")
        if self.char in LINE_BREAK_CHARS:
            raise ValueError("line breaks are LineBreakUnit, not CharUnit")


@dataclass(frozen=True, slots=True)
class LineBreakUnit:
    """Explicit or auto-wrap line break."""


@dataclass(frozen=True, slots=True)
class StyleSwitchUnit:
    """Ink change applying to every following character."""

    style: InkStyle


StreamUnit = Union[CharUnit, LineBreakUnit, StyleSwitchUnit]
RawStream = Sequence[StreamUnit]

LINE_BREAK = LineBreakUnit()
LINE_BREAK_CHARS = frozenset({"\n", "\r"})


@dataclass(frozen=True, slots=True)
class Glyph:
    """A decoded visible character and the ink it was typed with."""

    char: str
    style: InkStyle = InkStyle.DEFAULT


class _LineBoundary:
    __slots__ = ()

    def __repr__(self) -> str:
        return "LINE_BOUNDARY"


LINE_BOUNDARY = _LineBoundary()
DecodedItem = Union[Glyph, _LineBoundary]


def encode_switch(style: InkStyle | str) -> StyleSwitchUnit:
    return StyleSwitchUnit(InkStyle(style))


def decode(stream: Iterable[StreamUnit]) -> Iterator[DecodedItem]:
    """Replay ``stream`` yielding glyphs and ``LINE_BOUNDARY`` signals.

    Markers update the running style and yield nothing. Any unit that is not
    a character or a line break is treated as a marker, so decoding never
    raises.
    """

    style = InkStyle.DEFAULT
    for unit in stream:
        if isinstance(unit, CharUnit):
            yield Glyph(unit.char, style)
        elif isinstance(unit, LineBreakUnit):
            yield LINE_BOUNDARY
        elif isinstance(unit, StyleSwitchUnit):
            style = unit.style
        else:
            style = InkStyle.DEFAULT


def decode_glyph_lines(stream: Iterable[StreamUnit]) -> List[List[Glyph]]:
    """Group decoded glyphs into lines; a trailing empty line is kept."""

    lines: List[List[Glyph]] = [[]]
    for item in decode(stream):
        if item is LINE_BOUNDARY:
            lines.append([])
        else:
            lines[-1].append(item)  # type: ignore[arg-type]
    return lines


def effective_style(stream: Sequence[StreamUnit]) -> InkStyle:
    """Style in force at the end of ``stream`` (last marker or default)."""

    for unit in reversed(stream):
        if isinstance(unit, StyleSwitchUnit):
            return unit.style
    return InkStyle.DEFAULT


# -- string wire form -------------------------------------------------------

SENTINEL = "§"
_TAG_FOR_STYLE = {InkStyle.ACCENT: "r", InkStyle.DEFAULT: "b"}
_STYLE_FOR_TAG = {tag: style for style, tag in _TAG_FOR_STYLE.items()}


def dumps_stream(stream: Iterable[StreamUnit]) -> str:
    """Serialise units to the note content string."""

    parts: List[str] = []
    for unit in stream:
        if isinstance(unit, CharUnit):
            parts.append(SENTINEL * 2 if unit.char == SENTINEL else unit.char)
        elif isinstance(unit, LineBreakUnit):
            parts.append("\n")
        elif isinstance(unit, StyleSwitchUnit):
            parts.append(SENTINEL + _TAG_FOR_STYLE[unit.style])
    return "".join(parts)


def loads_stream(text: str) -> Tuple[StreamUnit, ...]:
    """Parse note content back into units.

    ``\\r\\n`` and lone ``\\r`` count as one break. A dangling sentinel or an
    unknown tag becomes a switch back to the default ink; the character after
    a stray sentinel is kept as content.
    """

    units: List[StreamUnit] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == SENTINEL:
            tag = text[index + 1] if index + 1 < length else ""
            if tag == SENTINEL:
                units.append(CharUnit(SENTINEL))
            elif tag in _STYLE_FOR_TAG:
                units.append(StyleSwitchUnit(_STYLE_FOR_TAG[tag]))
            else:
                # Stray sentinel; whatever follows is still content.
                units.append(StyleSwitchUnit(InkStyle.DEFAULT))
                index += 1
                continue
            index += 2
            continue
        if char == "\r":
            if index + 1 < length and text[index + 1] == "\n":
                index += 1
            units.append(LINE_BREAK)
        elif char == "\n":
            units.append(LINE_BREAK)
        else:
            units.append(CharUnit(char))
        index += 1
    return tuple(units)


__all__ = [
    "InkStyle",
    "CharUnit",
    "LineBreakUnit",
    "StyleSwitchUnit",
    "StreamUnit",
    "RawStream",
    "LINE_BREAK",
    "LINE_BREAK_CHARS",
    "Glyph",
    "LINE_BOUNDARY",
    "DecodedItem",
    "SENTINEL",
    "encode_switch",
    "decode",
    "decode_glyph_lines",
    "effective_style",
    "dumps_stream",
    "loads_stream",
]
