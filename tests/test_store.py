"""Tests for the history store and its persistence surfaces."""

import json
import logging
from datetime import datetime, timezone

import pytest

from rotation.models import SupersetRecord, TrackerState, empty_history
from rotation.muscles import MUSCLE_ORDER
from rotation.snapshot import InvalidShapeError, MalformedEncodingError, encode_snapshot
from rotation.store import HistoryStore, JsonFileKeyValueStore, MemoryKeyValueStore

STAMP = datetime(2026, 10, 10, 8, 0, tzinfo=timezone.utc)


def _state() -> TrackerState:
    history = empty_history()
    history["back"] = STAMP
    history["core"] = STAMP
    record = SupersetRecord(timestamp=STAMP, main="back", supersets=("core",))
    return TrackerState(history=history, superset_log=(record,))


class TestLoad:
    def test_first_run_defaults(self):
        state = HistoryStore(MemoryKeyValueStore()).load()
        assert state.history == {m: None for m in MUSCLE_ORDER}
        assert state.superset_log == ()

    def test_save_then_load(self):
        store = HistoryStore(MemoryKeyValueStore())
        store.save(_state())
        assert store.load() == _state()

    def test_save_writes_both_slots(self):
        surface = MemoryKeyValueStore()
        HistoryStore(surface).save(_state())
        slots = surface.as_dict()
        assert set(slots) == {"workoutHistory", "supersetHistory"}
        assert json.loads(slots["workoutHistory"])["back"] == "2026-10-10T08:00:00.000Z"
        assert json.loads(slots["supersetHistory"])[0]["main"] == "back"

    def test_unparseable_slot_defaults_independently(self, caplog):
        surface = MemoryKeyValueStore()
        HistoryStore(surface).save(_state())
        surface.set("workoutHistory", "{not json")

        with caplog.at_level(logging.WARNING, logger="rotation.store"):
            state = HistoryStore(surface).load()

        assert state.history == empty_history()
        assert state.superset_log == _state().superset_log
        assert "workoutHistory" in caplog.text

    def test_invalid_slot_shape_defaults(self):
        surface = MemoryKeyValueStore({
            "workoutHistory": json.dumps({"glutes": None}),
            "supersetHistory": json.dumps({"not": "a list"}),
        })
        assert HistoryStore(surface).load() == TrackerState()

    def test_deeply_nested_slot_defaults(self):
        surface = MemoryKeyValueStore()
        HistoryStore(surface).save(_state())
        surface.set("workoutHistory", "[" * 100000)

        state = HistoryStore(surface).load()

        assert state.history == empty_history()
        assert state.superset_log == _state().superset_log

    def test_four_muscle_history_is_completed(self):
        legacy = {"shoulders": None, "chest": "2026-10-10T08:00:00.000Z", "back": None, "legs": None}
        surface = MemoryKeyValueStore({"workoutHistory": json.dumps(legacy)})
        state = HistoryStore(surface).load()
        assert list(state.history) == list(MUSCLE_ORDER)
        assert state.history["chest"] == STAMP
        assert state.history["core"] is None


class TestImportExport:
    def test_export_matches_codec(self):
        store = HistoryStore(MemoryKeyValueStore())
        store.save(_state())
        assert store.export_snapshot() == encode_snapshot(_state())

    def test_import_replaces_state(self):
        store = HistoryStore(MemoryKeyValueStore())
        store.save(TrackerState())
        imported = store.import_snapshot(encode_snapshot(_state()))
        assert imported == _state()
        assert store.load() == _state()

    def test_malformed_import_leaves_state_untouched(self):
        surface = MemoryKeyValueStore()
        store = HistoryStore(surface)
        store.save(_state())
        before = surface.as_dict()

        with pytest.raises(MalformedEncodingError):
            store.import_snapshot("definitely not a backup code")

        assert surface.as_dict() == before

    def test_missing_field_import_leaves_state_untouched(self):
        surface = MemoryKeyValueStore()
        store = HistoryStore(surface)
        store.save(_state())
        before = surface.as_dict()

        with pytest.raises(InvalidShapeError):
            store.import_snapshot(json.dumps({"workoutHistory": {"chest": None}}))

        assert surface.as_dict() == before
        assert store.load() == _state()


class TestJsonFileKeyValueStore:
    def test_missing_file_reads_as_empty(self, tmp_path):
        surface = JsonFileKeyValueStore(tmp_path / "history.json")
        assert surface.get("workoutHistory") is None

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "history.json"
        HistoryStore.at_path(path).save(_state())
        assert HistoryStore.at_path(path).load() == _state()
        assert not path.with_suffix(".json.tmp").exists()

    def test_set_keeps_other_slots(self, tmp_path):
        surface = JsonFileKeyValueStore(tmp_path / "history.json")
        surface.set("a", "1")
        surface.set("b", "2")
        assert surface.get("a") == "1"
        assert surface.get("b") == "2"

    def test_corrupt_file_loads_defaults(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("garbage", encoding="utf-8")
        assert HistoryStore.at_path(path).load() == TrackerState()

    def test_undecodable_bytes_load_defaults(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_bytes(b"\xff\xfe garbage")
        store = HistoryStore.at_path(path)
        assert store.load() == TrackerState()

        store.save(_state())
        assert store.load() == _state()

    def test_non_string_slot_ignored(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps({"workoutHistory": {"chest": None}}), encoding="utf-8")
        assert JsonFileKeyValueStore(path).get("workoutHistory") is None
