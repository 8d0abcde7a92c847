"""Tests for the in-memory and JSON record stores."""

import json

import pytest

from unique_names.errors import StoreError
from unique_names.store.base import Record
from unique_names.store.json_store import JsonStore
from unique_names.store.memory import MemoryStore


class TestMemoryStore:
    def test_insert_assigns_ids(self):
        store = MemoryStore()
        assert store.insert({"name": "a"}).id == 1
        assert store.insert({"name": "b"}).id == 2

    def test_ids_continue_after_existing_records(self):
        store = MemoryStore([Record(id=7, values={"name": "a"})])
        assert store.insert({"name": "b"}).id == 8

    def test_count_matching_scope(self):
        store = MemoryStore()
        store.insert({"name": "Foo", "org": 1})
        store.insert({"name": "Foo", "org": 2})
        assert store.count_matching("name", "Foo", {}) == 2
        assert store.count_matching("name", "Foo", {"org": 1}) == 1
        assert store.count_matching("name", "Foo", {"org": 3}) == 0

    def test_null_scope_matches_missing_field(self):
        store = MemoryStore()
        store.insert({"name": "Foo"})
        assert store.exists("name", "Foo", {"org": None})

    def test_exclude_id(self):
        store = MemoryStore()
        rec = store.insert({"name": "Foo"})
        assert not store.exists("name", "Foo", {}, exclude_id=rec.id)

    def test_trashed_hidden_unless_included(self):
        store = MemoryStore()
        rec = store.insert({"name": "Foo"})
        store.trash(rec.id)
        assert not store.exists("name", "Foo", {})
        assert store.exists("name", "Foo", {}, include_trashed=True)
        store.restore(rec.id)
        assert store.exists("name", "Foo", {})

    def test_fetch_values_exact_or_prefix(self):
        store = MemoryStore()
        for name in ["Foo", "Foo (1)", "Foo (bar)", "Foobar", "Bar", "foo (2)"]:
            store.insert({"name": name})
        assert sorted(store.fetch_values("name", "Foo", "Foo (", {})) == ["Foo", "Foo (1)", "Foo (bar)"]

    def test_fetch_values_skips_non_strings(self):
        store = MemoryStore()
        store.insert({"name": None})
        store.insert({"name": 3})
        assert store.fetch_values("name", "Foo", "Foo (", {}) == []

    def test_update(self):
        store = MemoryStore()
        rec = store.insert({"name": "Foo", "org": 1})
        store.update(rec.id, {"name": "Bar"})
        assert store.get(rec.id).values == {"name": "Bar", "org": 1}

    def test_unknown_id(self):
        store = MemoryStore()
        with pytest.raises(KeyError):
            store.trash(42)
        assert store.get(42) is None

    def test_all(self):
        store = MemoryStore()
        a = store.insert({"name": "a"})
        store.insert({"name": "b"})
        store.trash(a.id)
        assert [r.values["name"] for r in store.all()] == ["b"]
        assert [r.values["name"] for r in store.all(include_trashed=True)] == ["a", "b"]


class TestJsonStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = JsonStore(tmp_path / "store.json")
        assert store.all() == []
        assert not (tmp_path / "store.json").exists()

    def test_persistence(self, tmp_path):
        path = tmp_path / "store.json"
        store1 = JsonStore(path, "items")
        rec = store1.insert({"name": "Foo", "org": 1})
        store1.trash(rec.id)

        store2 = JsonStore(path, "items")
        assert store2.exists("name", "Foo", {"org": 1}, include_trashed=True)
        assert not store2.exists("name", "Foo", {"org": 1})
        assert store2.insert({"name": "Bar"}).id == 2

    def test_collections_are_separate(self, tmp_path):
        path = tmp_path / "store.json"
        JsonStore(path, "items").insert({"name": "Foo"})
        JsonStore(path, "folders").insert({"name": "Foo"})

        assert len(JsonStore(path, "items").all()) == 1
        data = json.loads(path.read_text())
        assert set(data["collections"]) == {"items", "folders"}

    def test_json_format(self, tmp_path):
        path = tmp_path / "store.json"
        JsonStore(path, "items").insert({"name": "Foo"})
        data = json.loads(path.read_text())
        assert data == {"collections": {"items": [{"id": 1, "values": {"name": "Foo"}, "trashed": False}]}}

    def test_no_temp_file_left(self, tmp_path):
        path = tmp_path / "store.json"
        JsonStore(path).insert({"name": "Foo"})
        assert not (tmp_path / "store.tmp").exists()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        with pytest.raises(StoreError, match="Cannot read store"):
            JsonStore(path)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[]")
        with pytest.raises(StoreError, match="not a unique_names store"):
            JsonStore(path)

    def test_write_failure_leaves_store_unchanged(self, tmp_path):
        # The parent "directory" is a file, so the save cannot succeed
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = JsonStore(blocker / "store.json", "items")
        with pytest.raises(StoreError, match="Cannot write store"):
            store.insert({"name": "Foo"})
        assert store.all() == []
        assert not store.exists("name", "Foo", {})

    def test_failed_update_is_undone(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonStore(path, "items")
        rec = store.insert({"name": "Foo"})
        path.unlink()
        # The temp file cannot be renamed onto a directory
        path.mkdir()
        with pytest.raises(StoreError):
            store.update(rec.id, {"name": "Bar"})
        assert store.get(rec.id).values == {"name": "Foo"}
