import json

import pytest

from repositories.storage import (
    InMemoryStorage,
    JsonFileStorage,
    build_storage,
    load_json,
    save_json,
)


def test_in_memory_get_set():
    storage = InMemoryStorage({"a": "1"})
    assert storage.get("a") == "1"
    assert storage.get("missing") is None
    storage.set("b", "2")
    assert storage.get("b") == "2"


def test_json_file_storage_persists(tmp_path):
    path = tmp_path / "nested" / "store.json"
    JsonFileStorage(str(path)).set("lifexp_notes", '{"2026": "good year"}')

    reopened = JsonFileStorage(str(path))
    assert reopened.get("lifexp_notes") == '{"2026": "good year"}'
    assert json.loads(path.read_text(encoding="utf-8")) == {"lifexp_notes": '{"2026": "good year"}'}


def test_json_file_storage_keeps_other_keys(tmp_path):
    storage = JsonFileStorage(str(tmp_path / "store.json"))
    storage.set("a", "1")
    storage.set("b", "2")
    assert storage.get("a") == "1"
    assert storage.get("b") == "2"


def test_json_file_storage_unreadable_file_is_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    storage = JsonFileStorage(str(path))
    assert storage.get("anything") is None
    storage.set("k", "v")
    assert storage.get("k") == "v"


def test_json_file_storage_non_object_is_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert JsonFileStorage(str(path)).get("k") is None


def test_load_json_fails_open():
    storage = InMemoryStorage({"bad": "{oops", "wrong_type": '{"a": 1}'})
    assert load_json(storage, "bad", list, []) == []
    assert load_json(storage, "wrong_type", list, []) == []
    assert load_json(storage, "missing", dict, {}) == {}


def test_save_and_load_json_keeps_unicode():
    storage = InMemoryStorage()
    save_json(storage, "notes", {"2026": "₹ saved"})
    assert "₹" in storage.get("notes")
    assert load_json(storage, "notes", dict, {}) == {"2026": "₹ saved"}


def test_build_storage(tmp_path):
    assert isinstance(build_storage("file", str(tmp_path / "s.json")), JsonFileStorage)
    with pytest.raises(ValueError):
        build_storage("redis", "")
