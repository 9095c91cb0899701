from __future__ import annotations

import threading
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from typewriter_engine.archive import (
    KeyValueNoteStore,
    LocalNoteCache,
    Note,
    NoteArchive,
    RemoteNoteStore,
    TransportError,
    ValidationError,
)
from typewriter_engine.archive.server import create_app


def make_cache(tmp_path: Path) -> LocalNoteCache:
    return LocalNoteCache(tmp_path / "cache.json")


def make_remote(store: KeyValueNoteStore | None = None) -> RemoteNoteStore:
    return RemoteNoteStore(client=TestClient(create_app(store or KeyValueNoteStore())))


def failing_remote(status: int | None = 500) -> RemoteNoteStore:
    def handler(request: httpx.Request) -> httpx.Response:
        if status is None:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(status, json={"detail": "boom"})

    client = httpx.Client(base_url="http://archive", transport=httpx.MockTransport(handler))
    return RemoteNoteStore(client=client)


def test_submit_round_trips_through_server(tmp_path: Path) -> None:
    store = KeyValueNoteStore()
    archive = NoteArchive(make_cache(tmp_path), make_remote(store))

    note = archive.submit("ab§rcd")

    assert [n.id for n in store.list_notes()] == [note.id]
    assert archive.cache.load() == [note]
    assert archive.list_all()[0].content == "ab§rcd"


def test_submit_rejects_blank_and_never_lists_it(tmp_path: Path) -> None:
    store = KeyValueNoteStore()
    archive = NoteArchive(make_cache(tmp_path), make_remote(store))

    with pytest.raises(ValidationError):
        archive.submit("  §r \n")

    assert store.list_notes() == []
    assert archive.list_all() == []


@pytest.mark.parametrize("status", [500, None])
def test_submit_survives_remote_failure(tmp_path: Path, status: int | None) -> None:
    archive = NoteArchive(make_cache(tmp_path), failing_remote(status))

    note = archive.submit("offline page")

    assert note.content == "offline page"
    assert archive.list_all() == [note]


def test_list_all_merges_unsynced_local_notes(tmp_path: Path) -> None:
    store = KeyValueNoteStore()
    store.add(Note(id="remote", content="from server", created_at=1_000))
    cache = make_cache(tmp_path)
    cache.upsert(Note(id="local", content="never sent", created_at=2_000))

    notes = NoteArchive(cache, make_remote(store)).list_all()

    assert [n.id for n in notes] == ["local", "remote"]
    assert [n.id for n in cache.load()] == ["local", "remote"]


def test_delete_removes_everywhere(tmp_path: Path) -> None:
    store = KeyValueNoteStore()
    archive = NoteArchive(make_cache(tmp_path), make_remote(store))
    note = archive.submit("temporary")

    assert archive.delete(note.id) is True
    assert store.list_notes() == []
    assert archive.cache.load() == []


def test_offline_archive_uses_cache_only(tmp_path: Path) -> None:
    archive = NoteArchive(make_cache(tmp_path))

    first = archive.submit("one")
    archive.cache.upsert(Note(id="z", content="two", created_at=first.created_at + 1))

    assert [n.content for n in archive.list_all()] == ["two", "one"]


def test_remote_store_raises_transport_error() -> None:
    with pytest.raises(TransportError) as excinfo:
        failing_remote(503).list_notes()

    assert excinfo.value.status_code == 503

    with pytest.raises(TransportError):
        failing_remote(None).create_note("x")


def test_cache_tolerates_missing_and_corrupt_file(tmp_path: Path) -> None:
    cache = make_cache(tmp_path)
    assert cache.load() == []

    cache.path.write_text("{not json", encoding="utf-8")
    assert cache.load() == []

    cache.upsert(Note(id="a", content="fresh", created_at=1))
    assert [n.id for n in cache.load()] == ["a"]


def test_cache_keeps_unrelated_keys(tmp_path: Path) -> None:
    cache = make_cache(tmp_path)
    cache.path.write_text('{"other": 1}', encoding="utf-8")

    cache.upsert(Note(id="a", content="x", created_at=1))

    assert '"other": 1' in cache.path.read_text(encoding="utf-8")


def test_cache_skips_malformed_records(tmp_path: Path) -> None:
    cache = make_cache(tmp_path)
    cache.path.write_text(
        '{"typewriter-notes": [{"id": "ok", "content": "a", "timestamp": 3}, {"id": 1}, 7]}',
        encoding="utf-8",
    )

    assert [n.id for n in cache.load()] == ["ok"]


def test_note_decodes_styled_lines() -> None:
    note = Note(id="n", content="a§rb\nc", created_at=0)

    lines = note.glyph_lines()

    assert "".join(g.char for g in lines[0]) == "ab"
    assert lines[1][0].style.value == "accent"
    assert Note.from_dict(note.to_dict()) == note


def test_concurrent_submits_keep_every_note(tmp_path: Path) -> None:
    archive = NoteArchive(make_cache(tmp_path))

    def send(prefix: str) -> None:
        for index in range(25):
            archive.submit(f"{prefix} page {index}")

    workers = [threading.Thread(target=send, args=(name,)) for name in "abc"]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert len(archive.list_all()) == 75


def test_unwritable_cache_still_reaches_remote(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = KeyValueNoteStore()
    archive = NoteArchive(LocalNoteCache(blocker / "cache.json"), make_remote(store))

    note = archive.submit("still sent")

    assert [n.id for n in store.list_notes()] == [note.id]
    assert [n.content for n in archive.list_all()] == ["still sent"]
    assert archive.delete(note.id) is True
