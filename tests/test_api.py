"""Tests for notepad.main — the HTTP surface over store, session and utilities."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from notepad.config import Settings
from notepad.main import create_app
from notepad.models import Note
from notepad.persistence import MemoryKeyValueStore, PersistenceAdapter

from conftest import FailingKeyValueStore, ManualScheduler

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def api_kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def client(api_kv: MemoryKeyValueStore, scheduler: ManualScheduler) -> Iterator[TestClient]:
    app = create_app(Settings(storage_backend="memory"), kv=api_kv, scheduler=scheduler)
    with TestClient(app) as c:
        yield c


def _active(client: TestClient) -> dict:
    return client.get("/notes/active").json()


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


class TestNotes:
    def test_startup_creates_default_note(self, client: TestClient) -> None:
        data = client.get("/notes").json()
        assert data["count"] == 1
        assert data["notes"][0]["title"] == "Untitled Note"
        assert data["activeId"] == data["notes"][0]["id"]

    def test_startup_hydrates_from_storage(self, scheduler: ManualScheduler) -> None:
        kv = MemoryKeyValueStore()
        notes = [Note(id="1", title="A"), Note(id="2", title="B")]
        PersistenceAdapter(kv).save(notes, "2")
        app = create_app(Settings(), kv=kv, scheduler=scheduler)
        with TestClient(app) as c:
            assert [n["id"] for n in c.get("/notes").json()["notes"]] == ["1", "2"]
            assert c.get("/session").json()["noteId"] == "2"

    def test_create_note(self, client: TestClient) -> None:
        resp = client.post("/notes", json={"title": "  Ideas "})
        assert resp.status_code == 201
        body = resp.json()
        assert body["note"]["title"] == "Ideas"
        assert body["activeId"] == body["note"]["id"]
        assert body["durable"] is True
        assert client.get("/session").json()["noteId"] == body["note"]["id"]

    def test_create_untitled_numbering(self, client: TestClient) -> None:
        client.post("/notes", json={"title": "Second"})
        body = client.post("/notes", json={}).json()
        assert body["note"]["title"] == "Untitled Note 3"

    def test_get_note_and_missing(self, client: TestClient) -> None:
        note = _active(client)
        assert client.get(f"/notes/{note['id']}").json() == note
        assert client.get("/notes/missing").status_code == 404

    def test_note_fields_camel_case(self, client: TestClient) -> None:
        assert set(_active(client)) == {"id", "title", "content", "createdAt", "updatedAt"}

    def test_select(self, client: TestClient) -> None:
        first = _active(client)
        client.post("/notes", json={"title": "Other"})
        resp = client.post(f"/notes/{first['id']}/select")
        assert resp.status_code == 200
        assert resp.json()["activeId"] == first["id"]
        assert client.get("/session").json()["noteId"] == first["id"]

    def test_select_missing(self, client: TestClient) -> None:
        before = _active(client)
        assert client.post("/notes/missing/select").status_code == 404
        assert _active(client)["id"] == before["id"]

    def test_rename(self, client: TestClient) -> None:
        note = _active(client)
        body = client.patch(f"/notes/{note['id']}", json={"title": " Renamed "}).json()
        assert body["note"]["title"] == "Renamed"

    def test_rename_blank_keeps_title(self, client: TestClient) -> None:
        note = _active(client)
        body = client.patch(f"/notes/{note['id']}", json={"title": "   "}).json()
        assert body["note"]["title"] == note["title"]
        assert body["note"]["updatedAt"] == note["updatedAt"]

    def test_rename_missing(self, client: TestClient) -> None:
        assert client.patch("/notes/missing", json={"title": "x"}).status_code == 404

    def test_replace_content(self, client: TestClient) -> None:
        note = _active(client)
        resp = client.put(f"/notes/{note['id']}/content", json={"content": "a\nb"})
        assert resp.json()["note"]["content"] == "a\nb"
        assert client.get("/session").json()["editableContent"] == "a<br>b"

    def test_replace_content_missing(self, client: TestClient) -> None:
        assert client.put("/notes/missing/content", json={"content": "x"}).status_code == 404

    def test_delete_last_note(self, client: TestClient) -> None:
        note = _active(client)
        body = client.delete(f"/notes/{note['id']}").json()
        assert body["note"]["id"] != note["id"]
        assert body["activeId"] == body["note"]["id"]
        assert client.get("/notes").json()["count"] == 1

    def test_delete_active_selects_first(self, client: TestClient) -> None:
        first = _active(client)
        second = client.post("/notes", json={"title": "B"}).json()["note"]
        body = client.delete(f"/notes/{second['id']}").json()
        assert body["activeId"] == first["id"]

    def test_delete_missing(self, client: TestClient) -> None:
        assert client.delete("/notes/missing").status_code == 404

    def test_search(self, client: TestClient) -> None:
        client.post("/notes", json={"title": "Shopping"})
        client.post("/notes", json={"title": "Work"})
        data = client.get("/notes", params={"q": "shop"}).json()
        assert [n["title"] for n in data["notes"]] == ["Shopping"]


# ---------------------------------------------------------------------------
# Edit session
# ---------------------------------------------------------------------------


class TestSession:
    def test_edits_debounced_into_one_commit(
        self, client: TestClient, scheduler: ManualScheduler
    ) -> None:
        client.post("/session/edits", json={"content": "Hello"})
        scheduler.advance(100)
        state = client.post("/session/edits", json={"content": "Hello<br>world"}).json()
        assert state["state"] == "buffering"
        assert state["hasPending"] is True
        assert _active(client)["content"] == ""

        scheduler.advance(500)
        state = client.get("/session").json()
        assert state["state"] == "idle"
        assert state["commitCount"] == 1
        assert state["isSaving"] is True
        assert _active(client)["content"] == "Hello\nworld"

    def test_flush(self, client: TestClient) -> None:
        client.post("/session/edits", json={"content": "<i>draft</i>"})
        state = client.post("/session/flush").json()
        assert state["committed"] is True
        assert _active(client)["content"] == "draft"

    def test_select_flushes_pending_edit(self, client: TestClient) -> None:
        first = _active(client)
        second = client.post("/notes", json={"title": "B"}).json()["note"]
        client.post("/session/edits", json={"content": "for B"})
        client.post(f"/notes/{first['id']}/select")
        assert client.get(f"/notes/{second['id']}").json()["content"] == "for B"
        assert client.get("/session").json()["editableContent"] == ""

    def test_delete_discards_pending_edit(
        self, client: TestClient, scheduler: ManualScheduler
    ) -> None:
        note = _active(client)
        client.post("/session/edits", json={"content": "doomed"})
        client.delete(f"/notes/{note['id']}")
        scheduler.advance(1000)
        assert _active(client)["content"] == ""
        assert client.get("/session").json()["commitCount"] == 0

    def test_shutdown_flushes(self, api_kv: MemoryKeyValueStore, scheduler: ManualScheduler) -> None:
        app = create_app(Settings(), kv=api_kv, scheduler=scheduler)
        with TestClient(app) as c:
            c.post("/session/edits", json={"content": "last words"})
        snapshot = PersistenceAdapter(api_kv).load()
        assert snapshot.notes[0].content == "last words"


# ---------------------------------------------------------------------------
# Text utilities, stats, export
# ---------------------------------------------------------------------------


class TestUtilities:
    def test_transform_free_text(self, client: TestClient) -> None:
        resp = client.post(
            "/transform",
            json={"text": "Hello   world\n\nHello   world", "operation": "removeDuplicateLines"},
        )
        assert resp.json()["text"] == "Hello   world\n"

    def test_transform_unknown_operation(self, client: TestClient) -> None:
        resp = client.post("/transform", json={"text": "x", "operation": "reverse"})
        assert resp.status_code == 422

    def test_transform_note_preview_does_not_store(self, client: TestClient) -> None:
        note = _active(client)
        client.put(f"/notes/{note['id']}/content", json={"content": "quiet"})
        body = client.post(
            f"/notes/{note['id']}/transform", json={"operation": "uppercase"}
        ).json()
        assert body["text"] == "QUIET"
        assert body["applied"] is False
        assert _active(client)["content"] == "quiet"

    def test_transform_note_apply_includes_pending_edit(self, client: TestClient) -> None:
        note = _active(client)
        client.post("/session/edits", json={"content": "pending text"})
        body = client.post(
            f"/notes/{note['id']}/transform",
            json={"operation": "titleCase", "apply": True},
        ).json()
        assert body["text"] == "Pending Text"
        assert body["applied"] is True
        assert _active(client)["content"] == "Pending Text"
        assert client.get("/session").json()["editableContent"] == "Pending Text"

    def test_stats(self, client: TestClient) -> None:
        note = _active(client)
        client.put(f"/notes/{note['id']}/content", json={"content": "one two\nthree"})
        stats = client.get(f"/notes/{note['id']}/stats").json()
        assert stats["words"] == 3
        assert stats["lines"] == 2
        assert stats["readingLabel"] == "Less than a minute read"

    def test_export_txt(self, client: TestClient) -> None:
        note = _active(client)
        client.patch(f"/notes/{note['id']}", json={"title": "My Note"})
        client.put(f"/notes/{note['id']}/content", json={"content": "body\ntext"})
        resp = client.get(f"/notes/{note['id']}/export")
        assert resp.status_code == 200
        assert resp.text == "body\ntext"
        assert resp.headers["content-type"].startswith("text/plain")
        assert "My%20Note.txt" in resp.headers["content-disposition"]

    @pytest.mark.parametrize("fmt", ["pdf", "docx"])
    def test_export_stubbed_formats(self, client: TestClient, fmt: str) -> None:
        note = _active(client)
        resp = client.get(f"/notes/{note['id']}/export", params={"format": fmt})
        assert resp.status_code == 501


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class TestOperations:
    def test_health(self, client: TestClient) -> None:
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["service"] == "notepad"
        assert data["total_notes"] == 1
        assert data["durable"] is True

    def test_metrics_endpoint(self, client: TestClient) -> None:
        client.get("/notes")
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "notepad_note_operations_total" in resp.text
        assert "notepad_http_requests_total" in resp.text

    def test_persistence_failure_is_reported_not_raised(self, scheduler: ManualScheduler) -> None:
        kv = FailingKeyValueStore()
        app = create_app(Settings(), kv=kv, scheduler=scheduler)
        with TestClient(app) as c:
            resp = c.post("/notes", json={"title": "Volatile"})
            assert resp.status_code == 201
            assert resp.json()["durable"] is False
            assert c.get("/health").json()["status"] == "degraded"
            assert c.get("/notes").json()["count"] == 2
