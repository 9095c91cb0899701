"""Shared session types: key input, results, event bus, and context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from typewriter_engine.archive import Note, NoteArchive
from typewriter_engine.buffer import TypewriterBuffer
from typewriter_engine.config import PaperConfig
from typewriter_engine.presentation import PaperScroll

Job = Callable[[], None]


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to the session."""

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None

    @property
    def token(self) -> str:
        if self.modifiers:
            modifier = "+".join(sorted(m.lower() for m in self.modifiers))
            return f"{modifier}+{self.key.lower()}"
        return self.key if len(self.key) == 1 else self.key.lower()

    @property
    def printable(self) -> Optional[str]:
        """The character to type, if this key types one."""

        if set(m.lower() for m in self.modifiers) & {"ctrl", "alt", "meta"}:
            return None
        text = self.text
        if text is None or len(text) != 1 or not text.isprintable():
            return None
        return text


@dataclass(slots=True)
class SessionResult:
    """Result returned from ``TypewriterSession.handle_key``."""

    consumed: bool
    status: str = "ok"
    message: Optional[str] = None


class SessionBus:
    """Minimal event bus letting actions notify the host UI."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


class FeedbackSink(Protocol):
    """Audio (or other) feedback for keystrokes."""

    def key_press(self) -> None: ...

    def carriage_return(self) -> None: ...


class SilentFeedback:
    def key_press(self) -> None:
        return None

    def carriage_return(self) -> None:
        return None


def run_inline(job: Job) -> None:
    job()


@dataclass(slots=True)
class SessionContext:
    """Services every action can reach."""

    buffer: TypewriterBuffer
    paper: PaperConfig = field(default_factory=PaperConfig)
    scroll: PaperScroll = field(default_factory=PaperScroll)
    bus: SessionBus = field(default_factory=SessionBus)
    archive: Optional[NoteArchive] = None
    feedback: FeedbackSink = field(default_factory=SilentFeedback)
    dispatch: Callable[[Job], None] = run_inline
    notes: List[Note] = field(default_factory=list)
    flags: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def for_paper(cls, paper: PaperConfig, **kwargs: object) -> "SessionContext":
        buffer = TypewriterBuffer(columns_per_line=paper.columns_per_line)
        return cls(buffer=buffer, paper=paper, **kwargs)  # type: ignore[arg-type]


__all__ = [
    "Job",
    "KeyInput",
    "SessionResult",
    "SessionBus",
    "FeedbackSink",
    "SilentFeedback",
    "run_inline",
    "SessionContext",
]
