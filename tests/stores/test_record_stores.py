"""Tests for the in-memory and JSON record stores."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from vibeedit.stores import JsonRecordStore, MemoryRecordStore, open_store


@pytest.fixture(params=["memory", "json"])
def store(request: pytest.FixtureRequest, tmp_path: Path):
    if request.param == "memory":
        return MemoryRecordStore()
    return JsonRecordStore(tmp_path / "data")


def test_get_returns_copies(store) -> None:
    store.put("things", "a", {"tags": ["x"]})

    record = store.get("things", "a")
    record["tags"].append("y")

    assert store.get("things", "a") == {"tags": ["x"]}
    assert store.get("things", "missing") is None


def test_compare_and_set_rejects_stale_revision(store) -> None:
    record, revision = store.get_versioned("counters", "hits")
    assert record is None and revision == 0

    assert store.compare_and_set("counters", "hits", 0, {"value": 1}) is True
    assert store.compare_and_set("counters", "hits", 0, {"value": 99}) is False

    record, revision = store.get_versioned("counters", "hits")
    assert record == {"value": 1}
    assert revision == 1


def test_query_filters_orders_and_limits(store) -> None:
    store.put("logs", "1", {"at": "2026-01-01", "resolved": False})
    store.put("logs", "2", {"at": "2026-01-03", "resolved": True})
    store.put("logs", "3", {"at": "2026-01-02", "resolved": False})
    store.put("logs", "4", {"at": "2026-01-04", "resolved": False})

    newest = store.query("logs", where={"resolved": False}, order_by="at", descending=True, limit=2)
    oldest = store.query("logs", order_by="at")

    assert [record["at"] for record in newest] == ["2026-01-04", "2026-01-02"]
    assert [record["at"] for record in oldest][0] == "2026-01-01"


def test_descending_query_puts_later_writes_first_on_ties(store) -> None:
    store.put("logs", "first", {"at": "same", "n": 1})
    store.put("logs", "second", {"at": "same", "n": 2})

    records = store.query("logs", order_by="at", descending=True)

    assert [record["n"] for record in records] == [2, 1]


def test_concurrent_compare_and_set_increments_are_not_lost() -> None:
    store = MemoryRecordStore()

    def bump() -> None:
        for _ in range(50):
            while True:
                record, revision = store.get_versioned("counters", "hits")
                value = (record or {}).get("value", 0)
                if store.compare_and_set("counters", "hits", revision, {"value": value + 1}):
                    break

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.get("counters", "hits") == {"value": 200}


def test_json_store_persists_between_instances(tmp_path: Path) -> None:
    root = tmp_path / "data"
    JsonRecordStore(root).put("projects/site/edits", "e1", {"status": "pending"})

    reopened = JsonRecordStore(root)
    record, revision = reopened.get_versioned("projects/site/edits", "e1")

    assert record == {"status": "pending"}
    assert revision == 1
    payload = json.loads((root / "projects" / "site" / "edits.json").read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert not (root / "projects" / "site" / "edits.json.tmp").exists()


def test_json_store_ignores_corrupt_files(tmp_path: Path) -> None:
    root = tmp_path / "data"
    root.mkdir()
    (root / "things.json").write_text("{not json", encoding="utf-8")

    assert JsonRecordStore(root).get("things", "a") is None


@pytest.mark.parametrize("collection", ["../escape", "projects/a b/edits", ""])
def test_json_store_rejects_unsafe_collection_names(tmp_path: Path, collection: str) -> None:
    with pytest.raises(ValueError):
        JsonRecordStore(tmp_path).get(collection, "key")


def test_open_store_picks_backend(tmp_path: Path) -> None:
    assert isinstance(open_store(None), MemoryRecordStore)
    assert isinstance(open_store(tmp_path), JsonRecordStore)


def test_json_stores_sharing_a_root_see_each_others_writes(tmp_path: Path) -> None:
    first = JsonRecordStore(tmp_path / "data")
    second = JsonRecordStore(tmp_path / "data")
    first.get_versioned("counters", "hits")

    assert second.compare_and_set("counters", "hits", 0, {"value": 1}) is True
    assert first.compare_and_set("counters", "hits", 0, {"value": 99}) is False

    record, revision = first.get_versioned("counters", "hits")
    assert (record, revision) == ({"value": 1}, 1)


def test_json_stores_sharing_a_root_do_not_lose_increments(tmp_path: Path) -> None:
    stores = [JsonRecordStore(tmp_path / "data") for _ in range(2)]

    def bump(store: JsonRecordStore) -> None:
        for _ in range(20):
            while True:
                record, revision = store.get_versioned("counters", "hits")
                value = (record or {}).get("value", 0)
                if store.compare_and_set("counters", "hits", revision, {"value": value + 1}):
                    break

    threads = [threading.Thread(target=bump, args=(store,)) for store in stores]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert JsonRecordStore(tmp_path / "data").get("counters", "hits") == {"value": 40}
