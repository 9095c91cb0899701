"""Executable Textual app that hosts the typewriter."""

from __future__ import annotations

import argparse
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when the app is run
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use typewriter_engine.adapters.textual.app"
    ) from exc

from typewriter_engine.archive import LocalNoteCache, Note, NoteArchive, RemoteNoteStore
from typewriter_engine.buffer import Glyph, InkStyle, TypewriterBuffer
from typewriter_engine.config import TypewriterConfig, load_config
from typewriter_engine.presentation import PageView, style_runs
from typewriter_engine.runtime import telemetry
from typewriter_engine.session import FeedbackSink, Job, SessionContext
from typewriter_engine.session.controller import TypewriterSession

from .controller import TextualTypewriterAdapter, TextualUIHooks

INK_STYLES = {InkStyle.DEFAULT: "bold black", InkStyle.ACCENT: "bold #dc2626"}
CARET = "▏"


def build_archive(config: TypewriterConfig) -> NoteArchive:
    cache = LocalNoteCache(config.archive.cache_path, key=config.archive.cache_key)
    remote = None
    if config.archive.base_url:
        remote = RemoteNoteStore(
            config.archive.base_url,
            token=config.archive.token,
            timeout=config.archive.timeout,
        )
    return NoteArchive(cache, remote)


def create_default_session(
    config: TypewriterConfig,
    *,
    archive: NoteArchive | None = None,
    dispatch: Callable[[Job], None] | None = None,
    feedback: FeedbackSink | None = None,
) -> TypewriterSession:
    """Build a session with the configured paper, archive, and default keymap."""

    context = SessionContext(
        buffer=TypewriterBuffer(columns_per_line=config.paper.columns_per_line),
        paper=config.paper,
        archive=archive,
    )
    if dispatch is not None:
        context.dispatch = dispatch
    if feedback is not None:
        context.feedback = feedback
    return TypewriterSession(context)


class BellFeedback:
    """Rings the terminal bell at the end of each line."""

    def __init__(self, app: App[Any]) -> None:
        self.app = app

    def key_press(self) -> None:
        return None

    def carriage_return(self) -> None:
        self.app.bell()


def render_lines(lines: Sequence[Sequence[Glyph]], caret_line: int | None = None) -> Text:
    text = Text()
    for index, line in enumerate(lines):
        if index:
            text.append("\n")
        for chunk, style in style_runs(tuple(line)):
            text.append(chunk, style=INK_STYLES[style])
        if index == caret_line:
            text.append(CARET, style="blink")
    return text


class TypewriterApp(App[None]):
    """Paper sheet on the right, wall of sent notes on the left."""

    CSS = """
	Screen {
		layout: vertical;
		background: #e8e6e1;
	}

	#desk {
		height: 1fr;
	}

	#notes-wall {
		width: 2fr;
		padding: 1 2;
	}

	.note {
		background: #faf9f6;
		color: black;
		border: round #d0d0d0;
		padding: 1 2;
		margin: 0 0 1 0;
	}

	#paper-scroll {
		width: 3fr;
	}

	#paper {
		background: #faf9f6;
		color: black;
		border: tall #e0e0e0;
		padding: 1 2;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, config: TypewriterConfig | None = None) -> None:
        super().__init__()
        self.config = config or load_config()
        self.archive = build_archive(self.config)
        self.session: TypewriterSession | None = None
        self.adapter: TextualTypewriterAdapter | None = None
        self._paper_widget: Static | None = None
        self._paper_scroll: VerticalScroll | None = None
        self._notes_wall: VerticalScroll | None = None
        self._status_widget: Static | None = None
        self._ui_thread: int | None = None
        self._logger = telemetry.get_logger("typewriter_engine.app")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="desk"):
            self._notes_wall = VerticalScroll(id="notes-wall")
            yield self._notes_wall
            self._paper_scroll = VerticalScroll(id="paper-scroll")
            with self._paper_scroll:
                self._paper_widget = Static("", id="paper")
                yield self._paper_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    async def on_mount(self) -> None:
        self._ui_thread = threading.get_ident()
        self.session = create_default_session(
            self.config,
            archive=self.archive,
            dispatch=self._dispatch,
            feedback=BellFeedback(self),
        )
        hooks = TextualUIHooks(
            update_page=self._update_page,
            update_status=self._update_status,
            update_notes=self._update_notes,
            update_ink=self._update_ink,
            log=self._log_line,
        )
        self.adapter = TextualTypewriterAdapter(self.session, hooks)
        self._dispatch(self._initial_load)

    def _initial_load(self) -> None:
        notes = self.archive.list_all()
        self._on_ui(self._update_notes, notes)

    def _dispatch(self, job: Job) -> None:
        self.run_worker(job, thread=True, group="archive", exit_on_error=False)

    def _on_ui(self, fn: Callable[..., Any], *args: Any) -> None:
        if threading.get_ident() == self._ui_thread:
            fn(*args)
        else:
            self.call_from_thread(fn, *args)

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text, modifiers = normalized
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        if self.adapter:
            self.adapter.handle_scroll(self.config.paper.line_height * 2)
            event.stop()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        if self.adapter:
            self.adapter.handle_scroll(-self.config.paper.line_height * 2)
            event.stop()

    def _update_page(self, view: PageView, scroll_offset: float) -> None:
        if self._paper_widget is None or self._paper_scroll is None:
            return
        self._paper_widget.update(render_lines(view.lines, view.caret_line))
        rows_scrolled = scroll_offset / self.config.paper.line_height
        self._paper_scroll.scroll_to(
            y=max(0.0, view.caret_line + rows_scrolled - 8), animate=False
        )

    def _update_status(self, status: str) -> None:
        self._on_ui(self._set_status, status)

    def _set_status(self, status: str) -> None:
        if self._status_widget is None or self.session is None:
            return
        caret = self.session.buffer.caret
        ink = self.session.buffer.style.value
        self._status_widget.update(
            f"{status} | line {caret.line + 1} col {caret.column} | ink {ink}"
        )

    def _update_ink(self, style: InkStyle) -> None:
        self._on_ui(self._set_status, f"ink {style.value}")

    def _update_notes(self, notes: List[Note]) -> None:
        self._on_ui(self._render_notes, notes)

    def _render_notes(self, notes: List[Note]) -> None:
        if self._notes_wall is None:
            return
        self._notes_wall.remove_children()
        for note in notes:
            self._notes_wall.mount(Static(render_lines(note.glyph_lines()), classes="note"))

    def _log_line(self, line: str) -> None:
        self._logger.debug(line)

    @staticmethod
    def _normalize_key(
        event: events.Key,
    ) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
        key = event.key
        if key in {"ctrl+c", "ctrl+q"}:
            return None
        *modifiers, name = key.split("+") if "+" in key[:-1] else [key]
        modifiers = [m for m in modifiers if m != "shift"]
        if name in {"enter", "return"}:
            return ("enter", None, tuple(modifiers))
        if name == "backspace":
            return ("backspace", None, tuple(modifiers))
        if not modifiers and event.character and event.is_printable:
            return (event.character, event.character, ())
        return (name, None, tuple(modifiers))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the typewriter.")
    parser.add_argument("--archive-url", help="Remote note archive base URL")
    parser.add_argument(
        "--offline", action="store_true", help="Keep notes in the local cache only"
    )
    parser.add_argument("--cache-file", type=Path, help="Local fallback cache path")
    parser.add_argument("--columns", type=int, help="Characters per line")
    parser.add_argument(
        "--log-preset",
        choices=("development", "app"),
        help="telelog preset",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    config = load_config()
    archive = config.archive
    if args.offline:
        archive = replace(archive, base_url=None)
    elif args.archive_url:
        archive = replace(archive, base_url=args.archive_url.rstrip("/"))
    if args.cache_file:
        archive = replace(archive, cache_path=args.cache_file)
    paper = config.paper
    if args.columns:
        paper = replace(paper, columns_override=args.columns)
    TypewriterApp(config=TypewriterConfig(paper=paper, archive=archive)).run()


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
