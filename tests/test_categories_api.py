"""Tests for the category HTTP API."""

from tests.conftest import make_category


def _create(client, name, parent_id=None):
    resp = client.post("/api/categories", json=make_category(name, parent_id=parent_id))
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestCreate:

    def test_create_root_category(self, client):
        data = _create(client, "Books")
        assert data["id"].startswith("cat-")
        assert data["user_id"] == "dev-user"
        assert data["parent_id"] is None
        assert data["path"] == ""
        assert data["sort_order"] == 10000.0

    def test_siblings_are_appended(self, client):
        _create(client, "First")
        second = _create(client, "Second")
        assert second["sort_order"] == 20000.0

    def test_child_gets_parent_path(self, client):
        parent = _create(client, "Books")
        child = _create(client, "Fiction", parent_id=parent["id"])
        grandchild = _create(client, "Crime", parent_id=child["id"])
        assert child["path"] == "Books"
        assert grandchild["path"] == "Books/Fiction"

    def test_metadata_is_returned(self, client):
        resp = client.post("/api/categories", json=make_category("Tagged", metadata={"color": "red"}))
        assert resp.status_code == 201
        assert resp.json()["metadata"] == {"color": "red"}

    def test_blank_name_rejected(self, client):
        resp = client.post("/api/categories", json=make_category("   "))
        assert resp.status_code == 422

    def test_slash_in_name_rejected(self, client):
        resp = client.post("/api/categories", json=make_category("a/b"))
        assert resp.status_code == 422

    def test_unknown_parent_returns_404(self, client):
        resp = client.post("/api/categories", json=make_category("Orphan", parent_id="cat-missing"))
        assert resp.status_code == 404
        assert resp.json()["error"] == "NOT_FOUND"


class TestTree:

    def test_tree_nests_children_in_order(self, client):
        a = _create(client, "A")
        _create(client, "B")
        _create(client, "A1", parent_id=a["id"])
        _create(client, "A2", parent_id=a["id"])

        tree = client.get("/api/categories/tree").json()
        assert [n["name"] for n in tree] == ["A", "B"]
        assert [c["name"] for c in tree[0]["children"]] == ["A1", "A2"]

    def test_empty_tree(self, client):
        assert client.get("/api/categories/tree").json() == []


class TestMove:

    def test_move_before(self, client):
        a = _create(client, "A")
        b = _create(client, "B")
        resp = client.put(f"/api/categories/{b['id']}/move",
                          json={"reference_id": a["id"], "position": "before"})
        assert resp.status_code == 200
        assert resp.json()["sort_order"] < a["sort_order"]

        tree = client.get("/api/categories/tree").json()
        assert [n["name"] for n in tree] == ["B", "A"]

    def test_move_inside_updates_paths(self, client):
        a = _create(client, "A")
        b = _create(client, "B")
        b1 = _create(client, "B1", parent_id=b["id"])

        resp = client.put(f"/api/categories/{b['id']}/move",
                          json={"reference_id": a["id"], "position": "inside"})
        assert resp.json()["parent_id"] == a["id"]

        tree = client.get("/api/categories/tree").json()
        moved = tree[0]["children"][0]
        assert moved["path"] == "A"
        assert moved["children"][0]["id"] == b1["id"]
        assert moved["children"][0]["path"] == "A/B"

    def test_move_to_root(self, client):
        a = _create(client, "A")
        a1 = _create(client, "A1", parent_id=a["id"])
        resp = client.put(f"/api/categories/{a1['id']}/move", json={"reference_id": None})
        assert resp.status_code == 200
        assert resp.json()["parent_id"] is None
        assert resp.json()["path"] == ""

    def test_cycle_returns_400(self, client):
        a = _create(client, "A")
        a1 = _create(client, "A1", parent_id=a["id"])
        resp = client.put(f"/api/categories/{a['id']}/move",
                          json={"reference_id": a1["id"], "position": "inside"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "INVALID_MOVE"

    def test_unknown_position_returns_422(self, client):
        a = _create(client, "A")
        resp = client.put(f"/api/categories/{a['id']}/move", json={"position": "sideways"})
        assert resp.status_code == 422

    def test_missing_node_returns_404(self, client):
        resp = client.put("/api/categories/cat-missing/move", json={"reference_id": None})
        assert resp.status_code == 404

    def test_shared_node_returns_403(self, client, repo):
        shared = repo.insert(None, "Shared", None, None, 10000.0)
        resp = client.put(f"/api/categories/{shared.id}/move", json={"reference_id": None})
        assert resp.status_code == 403
        assert resp.json()["error"] == "FORBIDDEN"


class TestRename:

    def test_rename_propagates_to_descendant_paths(self, client):
        a = _create(client, "A")
        a1 = _create(client, "A1", parent_id=a["id"])
        _create(client, "A1x", parent_id=a1["id"])

        resp = client.put(f"/api/categories/{a['id']}", json={"name": "Alpha", "description": "renamed"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Alpha"

        tree = client.get("/api/categories/tree").json()
        assert tree[0]["children"][0]["path"] == "Alpha"
        assert tree[0]["children"][0]["children"][0]["path"] == "Alpha/A1"


class TestDelete:

    def test_count_then_delete_subtree(self, client):
        a = _create(client, "A")
        a1 = _create(client, "A1", parent_id=a["id"])
        _create(client, "A1x", parent_id=a1["id"])
        _create(client, "B")

        count = client.get(f"/api/categories/{a['id']}/descendants/count").json()
        assert count == {"category_id": a["id"], "count": 2}

        resp = client.delete(f"/api/categories/{a['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"deleted_id": a["id"], "descendant_count": 2}

        tree = client.get("/api/categories/tree").json()
        assert [n["name"] for n in tree] == ["B"]

    def test_delete_missing_returns_404(self, client):
        resp = client.delete("/api/categories/cat-missing")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "NOT_FOUND"
        assert body["details"]["category_id"] == "cat-missing"

    def test_delete_shared_returns_403(self, client, repo):
        shared = repo.insert(None, "Shared", None, None, 10000.0)
        resp = client.delete(f"/api/categories/{shared.id}")
        assert resp.status_code == 403
