"""Session controller dispatching key events to typewriter actions."""

from __future__ import annotations

from typing import Optional

from typewriter_engine.buffer import TypewriterBuffer
from typewriter_engine.config import PaperConfig
from typewriter_engine.keymaps import (
    TYPE_ACTION_ID,
    KeymapRegistry,
    ResolutionMatch,
    load_default_keymaps,
)
from typewriter_engine.presentation import PageView, present
from typewriter_engine.runtime import telemetry

from .context import KeyInput, SessionContext, SessionResult


class TypewriterSession:
    """Owns the keymap and routes every input event through it.

    Bound tokens run their action; any other printable key types itself.
    Mutations are strictly sequential, one event at a time.
    """

    def __init__(
        self,
        context: SessionContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        load_defaults: bool = True,
    ) -> None:
        self.context = context
        self.logger = telemetry.get_logger("typewriter_engine.session")
        self.keymap_registry = keymap_registry or KeymapRegistry(
            logger_name="typewriter_engine.keymaps"
        )
        if load_defaults and keymap_registry is None:
            load_default_keymaps(self.keymap_registry)
        self.context.flags.setdefault("page_has_text", not context.buffer.is_blank)

    @property
    def buffer(self) -> TypewriterBuffer:
        return self.context.buffer

    def handle_key(self, key: KeyInput) -> SessionResult:
        with telemetry.span(
            name="session::key",
            component="session",
            metadata={"key": key.token},
        ) as handle:
            match = self.keymap_registry.resolve(key.token, context=self.context.flags)
            if match is None and key.printable is not None:
                match = ResolutionMatch(
                    binding=None,
                    action=self.keymap_registry.get_action(TYPE_ACTION_ID),
                )
            if match is None:
                handle.add_metadata("status", "miss")
                return SessionResult(consumed=False, status="miss", message="unbound")
            handle.add_metadata("action", match.action.id)
            return self._execute(match, key)

    def type_text(self, text: str) -> SessionResult:
        """Feed ``text`` as keystrokes; ``\\n`` presses enter."""

        result = SessionResult(consumed=False, status="noop")
        for char in text:
            if char == "\n":
                result = self.handle_key(KeyInput(key="enter"))
            else:
                result = self.handle_key(KeyInput(key=char, text=char))
        return result

    def scroll(self, delta: float) -> float:
        offset = self.context.scroll.scroll(delta)
        self.context.bus.emit("paper.scrolled", offset)
        return offset

    def view(self) -> PageView:
        return present(self.context.buffer.stream, self.context.paper)

    def _execute(self, match: ResolutionMatch, key: KeyInput) -> SessionResult:
        outcome = match.action(self.context, key)
        if isinstance(outcome, SessionResult):
            return outcome
        return SessionResult(consumed=True)


def create_session(
    context: Optional[SessionContext] = None,
    *,
    keymap_registry: KeymapRegistry | None = None,
) -> TypewriterSession:
    """Session with default paper and keymap, unless overridden."""

    return TypewriterSession(
        context or SessionContext.for_paper(PaperConfig()),
        keymap_registry=keymap_registry,
    )


__all__ = ["TypewriterSession", "create_session"]
