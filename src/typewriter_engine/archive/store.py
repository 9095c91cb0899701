"""Key-value note storage behind the archive service."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, List, Optional

from .errors import StorageError
from .models import Note, newest_first

KEY_PREFIX = "note:"


class KeyValueNoteStore:
    """Notes keyed ``note:<id>``; persisted to a JSON file when ``path`` is set."""

    def __init__(self, path: Optional[Path | str] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._values: Dict[str, dict] = {}
        if self.path is not None and self.path.exists():
            self._values = self._read(self.path)

    @staticmethod
    def _read(path: Path) -> Dict[str, dict]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Cannot read note store {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Note store {path} is not a JSON object")
        return {key: value for key, value in data.items() if isinstance(value, dict)}

    def _flush(self, values: Dict[str, dict]) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(values, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise StorageError(f"Cannot write note store {self.path}: {exc}") from exc

    def get_by_prefix(self, prefix: str = KEY_PREFIX) -> List[dict]:
        with self._lock:
            return [dict(v) for k, v in self._values.items() if k.startswith(prefix)]

    def list_notes(self) -> List[Note]:
        notes = []
        for record in self.get_by_prefix(KEY_PREFIX):
            try:
                notes.append(Note.from_dict(record))
            except ValueError as exc:
                raise StorageError(str(exc)) from exc
        return newest_first(notes)

    def add(self, note: Note) -> Note:
        # Memory only changes once the file write succeeded.
        with self._lock:
            values = {**self._values, f"{KEY_PREFIX}{note.id}": note.to_dict()}
            self._flush(values)
            self._values = values
        return note

    def delete(self, note_id: str) -> bool:
        key = f"{KEY_PREFIX}{note_id}"
        with self._lock:
            if key not in self._values:
                return False
            values = {k: v for k, v in self._values.items() if k != key}
            self._flush(values)
            self._values = values
        return True


__all__ = ["KEY_PREFIX", "KeyValueNoteStore"]
