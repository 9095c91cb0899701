"""Local-first note archive with best-effort remote sync."""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol, TypeVar

from typewriter_engine.runtime import telemetry

from .cache import LocalNoteCache
from .errors import TransportError
from .models import Note, ensure_content, newest_first

T = TypeVar("T")


class RemoteArchive(Protocol):
    def list_notes(self) -> List[Note]: ...

    def create_note(self, content: str) -> Note: ...

    def delete_note(self, note_id: str) -> bool: ...


class NoteArchive:
    """Accepts finalized pages and keeps the note list available offline.

    Every submission lands in the local cache before the remote call is
    attempted. Remote failures and an unwritable cache are logged and
    absorbed; only blank content raises (``ValidationError``).
    """

    def __init__(
        self,
        cache: LocalNoteCache,
        remote: Optional[RemoteArchive] = None,
        *,
        logger_name: str | None = "typewriter_engine.archive",
    ) -> None:
        self.cache = cache
        self.remote = remote
        self._logger_name = logger_name

    def submit(self, raw_content: str) -> Note:
        ensure_content(raw_content)
        local = Note.create(raw_content)
        self._write_cache("submit", lambda: self.cache.upsert(local), None)
        if self.remote is None:
            return local

        try:
            stored = self.remote.create_note(raw_content)
        except TransportError as exc:
            self._absorb("submit", exc, note_id=local.id)
            return local

        self._write_cache("submit", lambda: self.cache.replace(local.id, stored), None)
        telemetry.record_event(
            "archive.submitted",
            data={"note_id": stored.id, "local_id": local.id},
            logger_name=self._logger_name,
        )
        return stored

    def list_all(self) -> List[Note]:
        if self.remote is None:
            return self.cache.load()
        try:
            notes = self.remote.list_notes()
        except TransportError as exc:
            self._absorb("list", exc)
            return self.cache.load()

        # Notes whose submission never reached the remote stay listed.
        merged = self._write_cache("list", lambda: self.cache.merge(notes), None)
        if merged is not None:
            return merged
        overlay = {note.id: note for note in self.cache.load()}
        overlay.update({note.id: note for note in notes})
        return newest_first(overlay.values())

    def delete(self, note_id: str) -> bool:
        removed = self._write_cache("delete", lambda: self.cache.remove(note_id), False)
        if self.remote is None:
            return removed
        try:
            return self.remote.delete_note(note_id) or removed
        except TransportError as exc:
            self._absorb("delete", exc, note_id=note_id)
            return removed

    def _write_cache(self, operation: str, write: Callable[[], T], fallback: T) -> T:
        try:
            return write()
        except OSError as exc:
            telemetry.record_event(
                "archive.cache_unwritable",
                level="warning",
                data={
                    "operation": operation,
                    "path": str(self.cache.path),
                    "error": str(exc),
                },
                logger_name=self._logger_name,
            )
            return fallback

    def _absorb(self, operation: str, exc: TransportError, **data: object) -> None:
        telemetry.record_event(
            "archive.remote_failed",
            level="warning",
            data={
                "operation": operation,
                "error": str(exc),
                "status": exc.status_code,
                **data,
            },
            logger_name=self._logger_name,
        )


__all__ = ["NoteArchive", "RemoteArchive"]
