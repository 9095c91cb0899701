"""Minimal Textual adapter that wires session events into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from typewriter_engine.archive import Note
from typewriter_engine.buffer import InkStyle
from typewriter_engine.presentation import PageView
from typewriter_engine.session import KeyInput, SessionResult
from typewriter_engine.session.controller import TypewriterSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_page: Callable[[PageView, float], None]
    update_status: Callable[[str], None] = _noop
    update_notes: Callable[[List[Note]], None] = _noop
    update_ink: Callable[[InkStyle], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


class TextualTypewriterAdapter:
    """Bridges a TypewriterSession + bus events to a Textual-friendly surface."""

    def __init__(self, session: TypewriterSession, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self._subscribe_events()
        self._refresh_page()
        self.hooks.update_ink(session.buffer.style)

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> SessionResult:
        """Translate a Textual key event into a KeyInput and dispatch it."""

        normalized_modifiers = tuple(str(mod).lower() for mod in modifiers)
        self._log_state("key ->", key=key, text=text, mods=normalized_modifiers)
        result = self.session.handle_key(
            KeyInput(key=key, text=text, modifiers=normalized_modifiers)
        )
        if result.consumed:
            status = result.message or result.status
            if status:
                self.hooks.update_status(status)
            self._refresh_page()
        self._log_state(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            message=result.message,
        )
        return result

    def handle_scroll(self, delta: float) -> float:
        offset = self.session.scroll(delta)
        self._refresh_page()
        return offset

    def _subscribe_events(self) -> None:
        bus = self.session.context.bus
        for event in (
            "ink.changed",
            "page.sent",
            "note.archived",
            "notes.updated",
            "carriage.wrapped",
        ):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)
        if name == "ink.changed" and isinstance(payload, InkStyle):
            self.hooks.update_ink(payload)
        elif name == "notes.updated" and isinstance(payload, list):
            self.hooks.update_notes(payload)
        elif name == "page.sent":
            self.hooks.update_status("page_sent")

    def _refresh_page(self) -> None:
        self.hooks.update_page(self.session.view(), self.session.context.scroll.offset)

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.session.buffer
        return {
            "caret": (buffer.caret.line, buffer.caret.column),
            "ink": buffer.style.value,
            "units": len(buffer),
            "buffer_version": buffer.version,
            "scroll": self.session.context.scroll.offset,
        }


__all__ = ["TextualTypewriterAdapter", "TextualUIHooks"]
