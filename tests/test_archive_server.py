from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from typewriter_engine.archive import KeyValueNoteStore, Note, StorageError
from typewriter_engine.archive.server import create_app


@pytest.fixture
def store() -> KeyValueNoteStore:
    return KeyValueNoteStore()


@pytest.fixture
def client(store: KeyValueNoteStore) -> TestClient:
    return TestClient(create_app(store))


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_note_returns_record(client: TestClient, store: KeyValueNoteStore) -> None:
    response = client.post("/notes", json={"content": "hi §rthere"})

    assert response.status_code == 200
    note = response.json()["note"]
    assert note["content"] == "hi §rthere"
    assert isinstance(note["timestamp"], int)
    assert [n.id for n in store.list_notes()] == [note["id"]]


@pytest.mark.parametrize("content", ["", "   \n ", "§r  ", None, 42])
def test_create_note_rejects_blank_content(client: TestClient, content: object) -> None:
    response = client.post("/notes", json={"content": content})

    assert response.status_code == 400
    assert client.get("/notes").json() == {"notes": []}


def test_create_note_rejects_non_json(client: TestClient) -> None:
    response = client.post(
        "/notes", content=b"not json", headers={"content-type": "application/json"}
    )

    assert response.status_code == 400


def test_list_notes_newest_first(client: TestClient, store: KeyValueNoteStore) -> None:
    store.add(Note(id="a", content="old", created_at=1_000))
    store.add(Note(id="b", content="new", created_at=2_000))

    response = client.get("/notes")

    assert [n["id"] for n in response.json()["notes"]] == ["b", "a"]


def test_delete_note(client: TestClient, store: KeyValueNoteStore) -> None:
    store.add(Note(id="a", content="bye", created_at=1))

    response = client.delete("/notes/a")

    assert response.json() == {"success": True}
    assert store.list_notes() == []
    assert client.delete("/notes/missing").json() == {"success": True}


def test_token_protects_routes(store: KeyValueNoteStore) -> None:
    client = TestClient(create_app(store, token="secret"))

    assert client.get("/notes").status_code == 401
    assert (
        client.get("/notes", headers={"Authorization": "Bearer wrong"}).status_code
        == 401
    )
    ok = client.get("/notes", headers={"Authorization": "Bearer secret"})
    assert ok.status_code == 200


def test_storage_failure_maps_to_500(monkeypatch: pytest.MonkeyPatch) -> None:
    store = KeyValueNoteStore()

    def broken() -> list[Note]:
        raise StorageError("disk gone")

    monkeypatch.setattr(store, "list_notes", broken)
    client = TestClient(create_app(store))

    assert client.get("/notes").status_code == 500


def test_store_persists_to_file(tmp_path: Path) -> None:
    path = tmp_path / "notes.json"
    store = KeyValueNoteStore(path)
    store.add(Note(id="x", content="kept", created_at=5))

    data = json.loads(path.read_text(encoding="utf-8"))
    reopened = KeyValueNoteStore(path)

    assert list(data) == ["note:x"]
    assert reopened.list_notes() == [Note(id="x", content="kept", created_at=5)]


def test_store_rejects_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "notes.json"
    path.write_text("{broken", encoding="utf-8")

    with pytest.raises(StorageError):
        KeyValueNoteStore(path)


def test_failed_write_leaves_store_unchanged(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    store = KeyValueNoteStore(path)
    kept = store.add(Note(id="1", content="kept", created_at=1))
    path.unlink()
    path.mkdir()
    client = TestClient(create_app(store))

    created = client.post("/notes", json={"content": "hello"})
    deleted = client.delete(f"/notes/{kept.id}")

    assert created.status_code == 500
    assert deleted.status_code == 500
    assert store.list_notes() == [kept]
    assert [n["id"] for n in client.get("/notes").json()["notes"]] == ["1"]
    with pytest.raises(StorageError):
        store.add(Note(id="2", content="lost", created_at=2))
    assert store.list_notes() == [kept]
