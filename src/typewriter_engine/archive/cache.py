"""Local fallback cache: one keyed JSON record holding every note."""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List

from typewriter_engine.runtime import telemetry

from .models import Note, newest_first, parse_notes

DEFAULT_CACHE_KEY = "typewriter-notes"


class LocalNoteCache:
    """Durable backstop for the remote archive.

    The file holds ``{key: [note, ...]}``; a missing or corrupt file reads as
    an empty list rather than an error. Read-modify-write updates hold a
    per-file re-entrant lock, so archive jobs running on worker threads never
    drop each other's notes.
    """

    _locks: Dict[Path, threading.RLock] = {}
    _locks_guard = threading.Lock()

    def __init__(self, path: Path | str, *, key: str = DEFAULT_CACHE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    @contextlib.contextmanager
    def locked(self) -> Iterator[None]:
        target = self.path.expanduser().absolute()
        with self._locks_guard:
            lock = self._locks.setdefault(target, threading.RLock())
        with lock:
            yield

    def load(self) -> List[Note]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            telemetry.record_event(
                "archive.cache_unreadable",
                level="warning",
                data={"path": str(self.path), "error": str(exc)},
            )
            return []

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            telemetry.record_event(
                "archive.cache_corrupt",
                level="warning",
                data={"path": str(self.path), "error": str(exc)},
            )
            return []

        records = document.get(self.key, []) if isinstance(document, dict) else []
        if not isinstance(records, list):
            return []
        return newest_first(parse_notes(records))

    def save(self, notes: Iterable[Note]) -> None:
        with self.locked():
            self._write(newest_first(notes))

    def upsert(self, note: Note) -> List[Note]:
        return self._update(
            lambda notes: [existing for existing in notes if existing.id != note.id]
            + [note]
        )

    def replace(self, old_id: str, note: Note) -> List[Note]:
        return self._update(
            lambda notes: [
                existing for existing in notes if existing.id not in {old_id, note.id}
            ]
            + [note]
        )

    def merge(self, notes: Iterable[Note]) -> List[Note]:
        """Overlay ``notes`` onto the cached list by id and persist the result."""

        incoming = list(notes)

        def apply(cached: List[Note]) -> List[Note]:
            merged = {note.id: note for note in cached}
            merged.update({note.id: note for note in incoming})
            return list(merged.values())

        return self._update(apply)

    def remove(self, note_id: str) -> bool:
        with self.locked():
            notes = self.load()
            kept = [note for note in notes if note.id != note_id]
            if len(kept) == len(notes):
                return False
            self._write(newest_first(kept))
            return True

    def _update(self, change: Callable[[List[Note]], List[Note]]) -> List[Note]:
        with self.locked():
            notes = newest_first(change(self.load()))
            self._write(notes)
            return notes

    def _write(self, ordered: List[Note]) -> None:
        document = {}
        if self.path.exists():
            try:
                existing = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(existing, dict):
                    document = existing
            except (OSError, json.JSONDecodeError):
                document = {}
        document[self.key] = [note.to_dict() for note in ordered]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, ensure_ascii=False, indent=2)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = ["DEFAULT_CACHE_KEY", "LocalNoteCache"]
