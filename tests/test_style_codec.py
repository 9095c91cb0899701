from __future__ import annotations

import pytest

from typewriter_engine.buffer import (
    LINE_BOUNDARY,
    LINE_BREAK,
    CharUnit,
    Glyph,
    InkStyle,
    StyleSwitchUnit,
    decode,
    decode_glyph_lines,
    dumps_stream,
    effective_style,
    encode_switch,
    loads_stream,
)


def chars(text: str) -> list[CharUnit]:
    return [CharUnit(c) for c in text]


def test_decode_tracks_style_and_skips_markers() -> None:
    stream = [*chars("ab"), encode_switch(InkStyle.ACCENT), *chars("c")]

    assert list(decode(stream)) == [
        Glyph("a", InkStyle.DEFAULT),
        Glyph("b", InkStyle.DEFAULT),
        Glyph("c", InkStyle.ACCENT),
    ]


def test_decode_signals_line_boundaries() -> None:
    stream = [CharUnit("a"), LINE_BREAK, CharUnit("b")]

    items = list(decode(stream))

    assert items[1] is LINE_BOUNDARY
    assert items[2] == Glyph("b")


def test_decode_glyph_lines_keeps_trailing_empty_line() -> None:
    lines = decode_glyph_lines([CharUnit("a"), LINE_BREAK])

    assert lines == [[Glyph("a")], []]


def test_decode_empty_stream_is_one_empty_line() -> None:
    assert decode_glyph_lines([]) == [[]]


def test_encode_switch_accepts_style_names() -> None:
    assert encode_switch("accent") == StyleSwitchUnit(InkStyle.ACCENT)


def test_char_unit_rejects_line_breaks_and_multichar() -> None:
    with pytest.raises(ValueError):
        CharUnit("\n")
    with pytest.raises(ValueError):
        CharUnit("ab")


def test_effective_style_uses_last_marker() -> None:
    stream = [encode_switch("accent"), CharUnit("a"), encode_switch("default")]

    assert effective_style(stream) is InkStyle.DEFAULT
    assert effective_style(stream[:2]) is InkStyle.ACCENT
    assert effective_style([]) is InkStyle.DEFAULT


def test_wire_form_uses_sentinel_tags() -> None:
    stream = [
        *chars("ab"),
        encode_switch("accent"),
        CharUnit("c"),
        LINE_BREAK,
        encode_switch("default"),
        CharUnit("d"),
    ]

    assert dumps_stream(stream) == "ab§rc\n§bd"
    assert loads_stream("ab§rc\n§bd") == tuple(stream)


def test_literal_sentinel_is_escaped() -> None:
    stream = (CharUnit("§"), CharUnit("r"))

    text = dumps_stream(stream)

    assert text == "§§r"
    assert loads_stream(text) == stream
    assert [g.style for g in decode(loads_stream(text))] == [InkStyle.DEFAULT] * 2


def test_dangling_sentinel_becomes_default_switch() -> None:
    units = loads_stream("ab§")

    assert units == (CharUnit("a"), CharUnit("b"), StyleSwitchUnit(InkStyle.DEFAULT))
    assert [g.char for g in decode(units)] == ["a", "b"]


def test_unknown_tag_resets_to_default_and_keeps_following_text() -> None:
    units = loads_stream("§r§xa")

    assert [g for g in decode(units)] == [
        Glyph("x", InkStyle.DEFAULT),
        Glyph("a", InkStyle.DEFAULT),
    ]


def test_stray_sentinel_before_line_break_keeps_the_break() -> None:
    units = loads_stream("ab§\ncd")

    assert units == (
        CharUnit("a"),
        CharUnit("b"),
        StyleSwitchUnit(InkStyle.DEFAULT),
        LINE_BREAK,
        CharUnit("c"),
        CharUnit("d"),
    )
    assert len(decode_glyph_lines(units)) == 2


def test_carriage_return_variants_are_single_breaks() -> None:
    assert loads_stream("a\r\nb\rc") == (
        CharUnit("a"),
        LINE_BREAK,
        CharUnit("b"),
        LINE_BREAK,
        CharUnit("c"),
    )
