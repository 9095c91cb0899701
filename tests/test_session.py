from __future__ import annotations

from pathlib import Path
from typing import List

from typewriter_engine.archive import LocalNoteCache, Note, NoteArchive
from typewriter_engine.buffer import InkStyle
from typewriter_engine.config import PaperConfig
from typewriter_engine.session import Job, KeyInput, SessionContext
from typewriter_engine.session.controller import TypewriterSession, create_session


class CountingFeedback:
    def __init__(self) -> None:
        self.presses = 0
        self.returns = 0

    def key_press(self) -> None:
        self.presses += 1

    def carriage_return(self) -> None:
        self.returns += 1


def make_session(
    *,
    columns: int = 30,
    archive: NoteArchive | None = None,
    feedback: CountingFeedback | None = None,
) -> TypewriterSession:
    context = SessionContext.for_paper(
        PaperConfig(columns_override=columns),
        archive=archive,
        feedback=feedback or CountingFeedback(),
    )
    return TypewriterSession(context)


def test_key_input_tokens() -> None:
    assert KeyInput(key="A", text="A").token == "A"
    assert KeyInput(key="Enter").token == "enter"
    assert KeyInput(key="s", modifiers=("shift", "ctrl")).token == "ctrl+shift+s"
    assert KeyInput(key="s", modifiers=("ctrl",), text="s").printable is None
    assert KeyInput(key="tab", text="\t").printable is None


def test_printable_keys_type_themselves() -> None:
    session = create_session()

    session.type_text("Hi there")

    assert session.view().text() == "Hi there"
    assert session.context.flags["page_has_text"] is True


def test_enter_and_backspace_are_bound() -> None:
    session = make_session()

    session.type_text("ab\ncd")
    session.handle_key(KeyInput(key="backspace"))

    assert session.view().text() == "ab\nc"


def test_unbound_special_key_is_a_miss() -> None:
    session = make_session()

    result = session.handle_key(KeyInput(key="f12"))

    assert result.consumed is False
    assert result.status == "miss"
    assert session.buffer.is_empty


def test_typing_snaps_scroll_back() -> None:
    session = make_session()
    session.scroll(-60)
    assert session.context.scroll.offset == -30

    session.type_text("x")

    assert session.context.scroll.offset == 0


def test_feedback_counts_presses_and_returns() -> None:
    feedback = CountingFeedback()
    session = make_session(columns=3, feedback=feedback)

    session.type_text("abcd\ne")

    assert feedback.presses == 5
    # One automatic wrap plus one explicit return.
    assert feedback.returns == 2


def test_wrap_emits_carriage_event() -> None:
    session = make_session(columns=2)
    wraps: List[object] = []
    session.context.bus.subscribe("carriage.wrapped", wraps.append)

    session.type_text("abc")

    assert len(wraps) == 1
    assert session.view().caret.line == 1


def test_ink_toggle_and_revert_via_backspace() -> None:
    session = make_session()
    inks: List[object] = []
    session.context.bus.subscribe("ink.changed", inks.append)
    session.type_text("a")

    toggled = session.handle_key(KeyInput(key="r", modifiers=("ctrl",)))
    reverted = session.handle_key(KeyInput(key="backspace"))

    assert toggled.message == "ink_accent"
    assert reverted.message == "ink_reverted"
    assert inks == [InkStyle.ACCENT, InkStyle.DEFAULT]
    assert session.view().text() == "a"


def test_explicit_ink_keys_set_style() -> None:
    session = make_session()

    accent = session.handle_key(KeyInput(key="e", modifiers=("ctrl",)))
    session.type_text("x")
    default = session.handle_key(KeyInput(key="b", modifiers=("ctrl",)))
    session.type_text("y")

    assert accent.message == "ink_accent"
    assert default.message == "ink_default"
    assert session.context.buffer.style is InkStyle.DEFAULT
    assert session.context.buffer.raw_content == "§rx§by"


def test_backspace_on_empty_page_is_noop() -> None:
    session = make_session()

    results = [session.handle_key(KeyInput(key="backspace")) for _ in range(3)]

    assert {r.status for r in results} == {"noop"}


def test_send_on_blank_page_does_nothing(tmp_path: Path) -> None:
    archive = NoteArchive(LocalNoteCache(tmp_path / "cache.json"))
    session = make_session(archive=archive)
    session.type_text("   ")

    result = session.handle_key(KeyInput(key="s", modifiers=("ctrl",)))

    assert result.status == "noop"
    assert archive.list_all() == []
    assert session.view().text() == "   "


def test_send_resets_page_before_archive_job_runs(tmp_path: Path) -> None:
    archive = NoteArchive(LocalNoteCache(tmp_path / "cache.json"))
    session = make_session(archive=archive)
    jobs: List[Job] = []
    session.context.dispatch = jobs.append
    notes_seen: List[object] = []
    session.context.bus.subscribe("notes.updated", notes_seen.append)

    session.type_text("ab")
    session.handle_key(KeyInput(key="r", modifiers=("ctrl",)))
    session.type_text("c")
    result = session.handle_key(KeyInput(key="s", modifiers=("ctrl",)))

    assert result.status == "sent"
    assert session.buffer.is_empty
    assert session.buffer.style is InkStyle.DEFAULT
    assert archive.list_all() == []

    session.type_text("next")
    jobs.pop()()

    assert session.view().text() == "next"
    assert [note.content for note in session.context.notes] == ["ab§rc"]
    assert notes_seen and isinstance(notes_seen[-1], list)
    assert isinstance(notes_seen[-1][0], Note)


def test_refresh_loads_notes(tmp_path: Path) -> None:
    cache = LocalNoteCache(tmp_path / "cache.json")
    cache.upsert(Note(id="1", content="old page", created_at=1))
    session = make_session(archive=NoteArchive(cache))

    session.handle_key(KeyInput(key="f5"))

    assert [n.id for n in session.context.notes] == ["1"]
