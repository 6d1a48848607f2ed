"""Tests for cursor stores."""

import json
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.cursor import CursorStateError, CursorStore, JsonCursorStore, MemoryCursorStore


class TestMemoryCursorStore:
    def test_defaults_to_zero(self) -> None:
        assert MemoryCursorStore().load() == 0

    def test_save_then_load(self) -> None:
        store = MemoryCursorStore()
        store.save(17)
        assert store.load() == 17

    def test_rejects_negative(self) -> None:
        with pytest.raises(CursorStateError):
            MemoryCursorStore().save(-1)

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MemoryCursorStore(), CursorStore)


class TestJsonCursorStore:
    """Validate the durable JSON store."""

    def test_missing_file_loads_zero(self, tmp_path) -> None:
        assert JsonCursorStore(tmp_path / "cursor.json").load() == 0

    def test_round_trip_creates_parent_dirs(self, tmp_path) -> None:
        path = tmp_path / "state" / "cursor.json"
        store = JsonCursorStore(path)
        store.save(99)
        assert json.loads(path.read_text(encoding="utf-8")) == {"cursor": 99, "version": 1}
        assert JsonCursorStore(path).load() == 99
        assert not path.with_name("cursor.json.tmp").exists()

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "cursor.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CursorStateError) as exc_info:
            JsonCursorStore(path).load()
        assert exc_info.value.kind == "state-load-json"

    def test_non_object_root(self, tmp_path) -> None:
        path = tmp_path / "cursor.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(CursorStateError) as exc_info:
            JsonCursorStore(path).load()
        assert exc_info.value.kind == "state-load-shape"

    def test_non_integer_cursor(self, tmp_path) -> None:
        path = tmp_path / "cursor.json"
        path.write_text('{"cursor": "abc"}', encoding="utf-8")
        with pytest.raises(CursorStateError) as exc_info:
            JsonCursorStore(path).load()
        assert exc_info.value.kind == "state-load-cursor"

    def test_save_rejects_negative(self, tmp_path) -> None:
        with pytest.raises(CursorStateError):
            JsonCursorStore(tmp_path / "cursor.json").save(-5)
