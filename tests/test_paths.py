"""Tests for materialized path derivation and maintenance."""

from types import SimpleNamespace

import pytest

from category_tree.exceptions import ForbiddenError, PathMaintenanceError
from category_tree.ordering.paths import compute_path, join_path, update_paths
from tests.fake_store import InMemoryNodeStore


def _expected_path(store, node):
    parent = store.find_by_id(node.parent_id) if node.parent_id else None
    if parent is None:
        return ""
    return f"{parent.path}/{parent.name}" if parent.path else parent.name


class TestComputePath:

    def test_root_level_has_empty_path(self):
        assert compute_path(None) == ""

    def test_child_of_root_node(self):
        assert compute_path(SimpleNamespace(path="", name="Clothing")) == "Clothing"

    def test_nested(self):
        assert compute_path(SimpleNamespace(path="Clothing", name="Menswear")) == "Clothing/Menswear"

    def test_join_path_treats_none_as_root(self):
        assert join_path(None, "Top") == "Top"


class TestUpdatePaths:

    @pytest.fixture()
    def store(self):
        store = InMemoryNodeStore()
        store.add("Clothing", node_id="c")
        store.add("Menswear", node_id="m", parent="c")
        store.add("Shirts", node_id="s", parent="m")
        store.add("Electronics", node_id="e")
        return store

    def test_rewrites_whole_subtree_after_move(self, store):
        store.rows["m"].parent_id = "e"
        written = update_paths(store, "m", "e")

        assert written == 2
        assert store.rows["m"].path == "Electronics"
        assert store.rows["s"].path == "Electronics/Menswear"

    def test_move_to_root_clears_path(self, store):
        store.rows["m"].parent_id = None
        update_paths(store, "m", None)
        assert store.rows["m"].path == ""
        assert store.rows["s"].path == "Menswear"

    def test_rename_propagates_to_descendants(self, store):
        store.rows["c"].name = "Apparel"
        update_paths(store, "c", None)
        assert store.rows["m"].path == "Apparel"
        assert store.rows["s"].path == "Apparel/Menswear"

    def test_idempotent(self, store):
        update_paths(store, "c", None)
        before = {node_id: row.path for node_id, row in store.rows.items()}
        update_paths(store, "c", None)
        assert {node_id: row.path for node_id, row in store.rows.items()} == before

    def test_invariant_holds_for_every_node(self, store):
        store.rows["c"].parent_id = "e"
        update_paths(store, "c", "e")
        for row in store.rows.values():
            assert row.path == _expected_path(store, row)

    def test_deep_chain_does_not_recurse(self):
        store = InMemoryNodeStore()
        parent = None
        for i in range(1200):
            parent = store.add(f"n{i}", node_id=f"d{i}", parent=parent).id
        store.rows["d0"].name = "root"
        assert update_paths(store, "d0", None) == 1200
        assert store.rows["d2"].path == "root/n1"

    def test_store_failure_is_wrapped(self, store):
        store.fail_path_updates = True
        with pytest.raises(PathMaintenanceError):
            update_paths(store, "m", "c")

    def test_child_deleted_mid_walk_is_skipped(self, store):
        store.add("Womenswear", node_id="w", parent="c")
        store.vanish_on_list.add("m")
        store.rows["c"].name = "Apparel"

        assert update_paths(store, "c", None) == 2
        assert store.rows["w"].path == "Apparel"
        assert store.rows["s"].path == "Clothing/Menswear"

    def test_other_store_errors_are_wrapped(self, store, monkeypatch):
        def gone(node_id, path):
            raise ForbiddenError(category_id=node_id)

        monkeypatch.setattr(store, "update_path", gone)
        with pytest.raises(PathMaintenanceError):
            update_paths(store, "m", "c")

    def test_missing_node_is_reported(self, store):
        with pytest.raises(PathMaintenanceError):
            update_paths(store, "ghost", None)
