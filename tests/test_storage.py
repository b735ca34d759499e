import pytest

from place_validator import config
from place_validator.storage import (
    MemoryStore,
    SqliteStore,
    clear_api_key,
    get_api_key,
    load_json,
    save_json,
    set_api_key,
)


def test_sqlite_store_round_trip_and_remove(tmp_path):
    path = str(tmp_path / "store.db")
    store = SqliteStore(path)
    assert store.get("k") is None
    store.set("k", "v1")
    store.set("k", "v2")
    assert store.get("k") == "v2"
    store.close()

    reopened = SqliteStore(path)
    assert reopened.get("k") == "v2"
    reopened.remove("k")
    reopened.remove("k")
    assert reopened.get("k") is None
    reopened.close()


def test_sqlite_store_in_memory():
    store = SqliteStore(":memory:")
    store.set("a", "1")
    assert store.get("a") == "1"
    store.close()


def test_load_json_tolerates_corruption():
    store = MemoryStore({"bad": "{", "wrong": '"text"', "good": '["x"]'})
    assert load_json(store, "bad", list) is None
    assert load_json(store, "wrong", list) is None
    assert load_json(store, "missing", list) is None
    assert load_json(store, "good", list) == ["x"]


def test_save_json_keeps_unicode():
    store = MemoryStore()
    save_json(store, "k", ["Zakład"])
    assert store.get("k") == '["Zakład"]'


def test_api_key_accessors():
    store = MemoryStore()
    assert get_api_key(store) is None
    with pytest.raises(ValueError):
        set_api_key(store, "   ")
    set_api_key(store, "  abc123  ")
    assert store.get(config.STORAGE_API_KEY) == "abc123"
    assert get_api_key(store) == "abc123"
    clear_api_key(store)
    assert get_api_key(store) is None


def test_blank_stored_key_counts_as_missing():
    store = MemoryStore({config.STORAGE_API_KEY: "  "})
    assert get_api_key(store) is None
