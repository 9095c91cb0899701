"""Archived note records."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from typewriter_engine.buffer import (
    CharUnit,
    Glyph,
    StreamUnit,
    decode_glyph_lines,
    loads_stream,
)

from .errors import ValidationError


def now_ms() -> int:
    return int(time.time() * 1000)


def new_note_id(created_at: Optional[int] = None) -> str:
    """Millisecond timestamp plus a random suffix, so two sends never collide."""

    stamp = now_ms() if created_at is None else created_at
    return f"{stamp}-{secrets.token_hex(3)}"


def ensure_content(content: str) -> str:
    """Reject content with no visible non-whitespace glyph (markers don't count)."""

    if not isinstance(content, str) or not any(
        isinstance(unit, CharUnit) and not unit.char.isspace()
        for unit in loads_stream(content)
    ):
        raise ValidationError("Note content is required")
    return content


@dataclass(frozen=True, slots=True)
class Note:
    """Immutable archived page; ``content`` is the wire form of its stream."""

    id: str
    content: str
    created_at: int

    @classmethod
    def create(cls, content: str, *, created_at: Optional[int] = None) -> "Note":
        stamp = now_ms() if created_at is None else created_at
        return cls(id=new_note_id(stamp), content=ensure_content(content), created_at=stamp)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Note":
        try:
            return cls(
                id=str(data["id"]),
                content=str(data["content"]),
                created_at=int(data.get("timestamp", data.get("created_at", 0))),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed note record: {data!r}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "timestamp": self.created_at}

    @property
    def stream(self) -> Tuple[StreamUnit, ...]:
        return loads_stream(self.content)

    def glyph_lines(self) -> List[List[Glyph]]:
        return decode_glyph_lines(self.stream)


def newest_first(notes: Iterable[Note]) -> List[Note]:
    return sorted(notes, key=lambda note: (note.created_at, note.id), reverse=True)


def parse_notes(records: Iterable[Any]) -> List[Note]:
    """Parse records, skipping anything that is not a well-formed note."""

    notes: List[Note] = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        try:
            notes.append(Note.from_dict(record))
        except ValueError:
            continue
    return notes


__all__ = [
    "Note",
    "ensure_content",
    "new_note_id",
    "newest_first",
    "now_ms",
    "parse_notes",
]
