"""Integration tests for the HTTP surface."""
import time

import pytest
from fastapi.testclient import TestClient

from organizer.api.routes import common
from organizer.main import app
from organizer.storage.local import LocalStorage
from fakes import FakeThumbnailService


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(common, "thumbnail_service", FakeThumbnailService(fail_pages={1}))
    monkeypatch.setattr(common, "storage", LocalStorage(str(tmp_path)))
    with TestClient(app) as c:
        yield c
    common.WORKSPACES.clear()


def poll(fn, attempts=200):
    for _ in range(attempts):
        result = fn()
        if result:
            return result
        time.sleep(0.01)
    raise AssertionError("condition not reached")


def new_workspace(client):
    res = client.post("/workspaces")
    assert res.status_code == 201
    return res.json()["workspace_id"]


def load(client, workspace_id, data, filename="doc.pdf", content_type="application/pdf"):
    return client.post(
        f"/workspaces/{workspace_id}/document",
        files={"file": (filename, data, content_type)},
    )


def wait_ready(client, workspace_id):
    def ready():
        state = client.get(f"/workspaces/{workspace_id}").json()
        return state if state["phase"] == "ready" else None

    return poll(ready)


class TestWorkspaces:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_new_workspace_is_empty(self, client):
        workspace_id = new_workspace(client)
        state = client.get(f"/workspaces/{workspace_id}").json()
        assert state["phase"] is None
        assert state["order"] == []

    @pytest.mark.parametrize("workspace_id", ["nope", "0b8a3c3e-1f2d-4c1a-9a6b-2f3e4d5c6b7a"])
    def test_unknown_workspace(self, client, workspace_id):
        assert client.get(f"/workspaces/{workspace_id}").status_code == 404

    def test_delete(self, client):
        workspace_id = new_workspace(client)
        assert client.delete(f"/workspaces/{workspace_id}").status_code == 200
        assert client.get(f"/workspaces/{workspace_id}").status_code == 404

    def test_delete_removes_workspace_files(self, client, make_pdf, tmp_path):
        workspace_id = new_workspace(client)
        load(client, workspace_id, make_pdf(2))
        wait_ready(client, workspace_id)
        assert client.post(f"/workspaces/{workspace_id}/export").status_code == 200
        assert (tmp_path / workspace_id).is_dir()

        client.delete(f"/workspaces/{workspace_id}")
        assert not (tmp_path / workspace_id).exists()


class TestLoadDocument:
    def test_load_and_render(self, client, make_pdf):
        workspace_id = new_workspace(client)
        res = load(client, workspace_id, make_pdf(3))
        assert res.status_code == 200
        body = res.json()
        assert body["page_count"] == 3
        assert body["order"] == [0, 1, 2]

        state = wait_ready(client, workspace_id)
        assert state["status"] == "Loaded 3 pages. Drag to reorder."
        assert [p["thumbnail_state"] for p in state["pages"]] == ["ready", "failed", "ready"]

    def test_thumbnails(self, client, make_pdf):
        workspace_id = new_workspace(client)
        generation = load(client, workspace_id, make_pdf(3)).json()["generation"]
        wait_ready(client, workspace_id)

        ok = client.get(f"/workspaces/{workspace_id}/pages/0/thumbnail")
        assert ok.status_code == 200
        assert ok.headers["content-type"] == "image/png"
        assert ok.content.startswith(b"png-0-")

        failed = client.get(f"/workspaces/{workspace_id}/pages/1/thumbnail")
        assert failed.status_code == 200
        assert failed.headers["x-thumbnail-state"] == "failed"
        assert failed.content.startswith(b"\x89PNG")

        assert client.get(f"/workspaces/{workspace_id}/pages/9/thumbnail").status_code == 404
        stale = client.get(f"/workspaces/{workspace_id}/pages/0/thumbnail", params={"generation": generation - 1})
        assert stale.status_code == 410

    def test_non_pdf_leaves_state_untouched(self, client, make_pdf):
        workspace_id = new_workspace(client)
        load(client, workspace_id, make_pdf(2))
        before = wait_ready(client, workspace_id)

        assert load(client, workspace_id, b"hello", "notes.txt", "text/plain").status_code == 400
        assert load(client, workspace_id, b"not really a pdf", "fake.pdf").status_code == 400

        after = client.get(f"/workspaces/{workspace_id}").json()
        assert after["generation"] == before["generation"]
        assert after["order"] == [0, 1]

    def test_unparseable_pdf(self, client):
        workspace_id = new_workspace(client)
        res = load(client, workspace_id, b"%PDF-1.7\n garbage without structure")
        assert res.status_code == 422
        view = client.get(f"/workspaces/{workspace_id}").json()
        assert view["phase"] == "failed"
        assert view["error"]
        assert view["order"] == []

    def test_old_generation_is_gone_even_without_a_loaded_document(self, client, make_pdf):
        workspace_id = new_workspace(client)
        generation = load(client, workspace_id, make_pdf(2)).json()["generation"]
        wait_ready(client, workspace_id)
        assert load(client, workspace_id, b"%PDF-1.7\n garbage without structure").status_code == 422

        url = f"/workspaces/{workspace_id}/pages/0/thumbnail"
        assert client.get(url, params={"generation": generation}).status_code == 410
        assert client.get(url).status_code == 409


class TestReorderAndExport:
    def test_move_then_export_and_download(self, client, make_pdf, source_order):
        workspace_id = new_workspace(client)
        load(client, workspace_id, make_pdf(5))
        wait_ready(client, workspace_id)

        moved = client.post(f"/workspaces/{workspace_id}/move", json={"from_position": 4, "to_position": 0})
        assert moved.json() == {"changed": True, "order": [4, 0, 1, 2, 3]}

        exported = client.post(f"/workspaces/{workspace_id}/export")
        assert exported.status_code == 200
        info = exported.json()
        assert info["filename"] == "reordered.pdf"

        res = client.get(info["url"])
        assert res.status_code == 200
        assert res.headers["content-type"] == "application/pdf"
        assert "reordered.pdf" in res.headers["content-disposition"]
        assert source_order(res.content) == [4, 0, 1, 2, 3]

    def test_fractional_drop_is_ignored(self, client, make_pdf):
        workspace_id = new_workspace(client)
        load(client, workspace_id, make_pdf(3))
        res = client.post(f"/workspaces/{workspace_id}/drop", json={"from_position": 0, "slot": 1.5})
        assert res.json() == {"changed": False, "order": [0, 1, 2]}
        res = client.post(f"/workspaces/{workspace_id}/drop", json={"from_position": 0, "slot": 3})
        assert res.json() == {"changed": True, "order": [1, 2, 0]}

    def test_export_without_document(self, client):
        workspace_id = new_workspace(client)
        assert client.post(f"/workspaces/{workspace_id}/export").status_code == 409
        assert client.post(f"/workspaces/{workspace_id}/print").status_code == 409
        assert client.post(f"/workspaces/{workspace_id}/move", json={"from_position": 0, "to_position": 1}).status_code == 409

    def test_unknown_download(self, client, make_pdf):
        workspace_id = new_workspace(client)
        load(client, workspace_id, make_pdf(1))
        url = f"/workspaces/{workspace_id}/downloads/0b8a3c3e-1f2d-4c1a-9a6b-2f3e4d5c6b7a"
        assert client.get(url).status_code == 404


class TestPrint:
    def test_print_flow(self, client, make_pdf, source_order):
        workspace_id = new_workspace(client)
        load(client, workspace_id, make_pdf(3))
        wait_ready(client, workspace_id)
        client.post(f"/workspaces/{workspace_id}/move", json={"from_position": 2, "to_position": 0})

        res = client.post(f"/workspaces/{workspace_id}/print")
        assert res.status_code == 200
        url = res.json()["url"]

        page = client.get(url)
        assert page.status_code == 200
        assert f'src="{url}/document"' in page.text

        document = client.get(f"{url}/document")
        assert document.headers["content-type"] == "application/pdf"
        assert document.headers["content-disposition"].startswith("inline")
        assert source_order(document.content) == [2, 0, 1]

        assert client.post(f"{url}/loaded").json() == {"print": True}
        assert client.get(f"/workspaces/{workspace_id}").json()["status"] == "Print dialog opened."
        assert client.post(f"{url}/dismissed").status_code == 200
        poll(lambda: client.get(url).status_code == 404)
