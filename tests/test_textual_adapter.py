from __future__ import annotations

from typing import List

from typewriter_engine.buffer import InkStyle
from typewriter_engine.presentation import PageView
from typewriter_engine.session import SessionContext
from typewriter_engine.session.controller import TypewriterSession
from typewriter_engine.config import PaperConfig
from typewriter_engine.adapters.textual import TextualTypewriterAdapter, TextualUIHooks


def make_session(columns: int = 30) -> TypewriterSession:
    context = SessionContext.for_paper(PaperConfig(columns_override=columns))
    return TypewriterSession(context)


def test_adapter_updates_page_and_status() -> None:
    session = make_session()
    pages: List[PageView] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_page=lambda view, _offset: pages.append(view),
        update_status=lambda status: statuses.append(status),
    )
    adapter = TextualTypewriterAdapter(session, hooks)

    adapter.handle_textual_key("h", text="h")
    adapter.handle_textual_key("i", text="i")

    assert pages[-1].text() == "hi"
    assert pages[-1].caret_column == 2
    assert statuses[-1] == "type"


def test_adapter_relays_ink_changes() -> None:
    session = make_session()
    inks: List[InkStyle] = []
    events: List[tuple[str, object | None]] = []
    hooks = TextualUIHooks(
        update_page=lambda view, _offset: None,
        update_ink=lambda ink: inks.append(ink),
        handle_event=lambda name, payload: events.append((name, payload)),
    )
    adapter = TextualTypewriterAdapter(session, hooks)

    adapter.handle_textual_key("r", modifiers=("Ctrl",))

    assert inks == [InkStyle.DEFAULT, InkStyle.ACCENT]
    assert ("ink.changed", InkStyle.ACCENT) in events


def test_adapter_reports_sent_page() -> None:
    session = make_session()
    statuses: List[str] = []
    events: List[str] = []
    hooks = TextualUIHooks(
        update_page=lambda view, _offset: None,
        update_status=lambda status: statuses.append(status),
        handle_event=lambda name, _payload: events.append(name),
    )
    adapter = TextualTypewriterAdapter(session, hooks)

    adapter.handle_textual_key("x", text="x")
    result = adapter.handle_textual_key("s", modifiers=("ctrl",))

    assert result.status == "sent_unarchived"
    assert "page.sent" in events
    assert "page_sent" in statuses
    assert session.buffer.is_empty


def test_adapter_scroll_updates_offset() -> None:
    session = make_session()
    offsets: List[float] = []
    hooks = TextualUIHooks(update_page=lambda _view, offset: offsets.append(offset))
    adapter = TextualTypewriterAdapter(session, hooks)

    adapter.handle_scroll(40)
    adapter.handle_textual_key("a", text="a")

    assert offsets[-2] == 20
    assert offsets[-1] == 0


def test_adapter_ignores_unbound_keys() -> None:
    session = make_session()
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_page=lambda view, _offset: None,
        update_status=lambda status: statuses.append(status),
    )
    adapter = TextualTypewriterAdapter(session, hooks)

    result = adapter.handle_textual_key("escape")

    assert result.consumed is False
    assert statuses == []


def test_adapter_emits_log_lines() -> None:
    session = make_session()
    logs: List[str] = []
    hooks = TextualUIHooks(
        update_page=lambda view, _offset: None,
        log=lambda line: logs.append(line),
    )
    adapter = TextualTypewriterAdapter(session, hooks)

    adapter.handle_textual_key("a", text="a")

    assert any(line.startswith("key ->") for line in logs)
    assert any(line.startswith("result <-") for line in logs)
