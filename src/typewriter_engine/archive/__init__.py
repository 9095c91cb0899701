"""Note archive: local cache, remote client, gateway, and HTTP service models.

The FastAPI service lives in ``typewriter_engine.archive.server`` and is not
imported here, so clients do not pull in the server stack.
"""

from .cache import DEFAULT_CACHE_KEY, LocalNoteCache
from .errors import ArchiveError, StorageError, TransportError, ValidationError
from .gateway import NoteArchive, RemoteArchive
from .models import Note, ensure_content, new_note_id, newest_first, now_ms, parse_notes
from .remote import RemoteNoteStore
from .store import KEY_PREFIX, KeyValueNoteStore

__all__ = [
    "DEFAULT_CACHE_KEY",
    "LocalNoteCache",
    "ArchiveError",
    "StorageError",
    "TransportError",
    "ValidationError",
    "NoteArchive",
    "RemoteArchive",
    "Note",
    "ensure_content",
    "new_note_id",
    "newest_first",
    "now_ms",
    "parse_notes",
    "RemoteNoteStore",
    "KEY_PREFIX",
    "KeyValueNoteStore",
]
