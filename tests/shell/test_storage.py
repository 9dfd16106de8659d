"""Unit tests for key-value storage and persisted slots."""

import json
from unittest.mock import MagicMock

import pytest

from macroplan.core.models import Meal
from macroplan.shell.storage import (
    FileKeyValueStore,
    MemoryKeyValueStore,
    ModelListCodec,
    PersistedSlot,
    StorageConfig,
    create_store,
)


@pytest.fixture
def store():
    return MemoryKeyValueStore()


class TestSlotInitialization:
    """Tests for loading a PersistedSlot."""

    def test_default_when_empty(self, store):
        """Absent key yields the default."""
        slot = PersistedSlot(store, "test-key", "default")
        assert slot.value == "default"

    def test_stored_string(self):
        slot = PersistedSlot(MemoryKeyValueStore({"test-key": "stored-value"}), "test-key", "default")
        assert slot.value == "stored-value"

    def test_stored_number(self):
        slot = PersistedSlot(MemoryKeyValueStore({"test-key": "42"}), "test-key", 0)
        assert slot.value == 42

    def test_stored_decimal_number(self):
        slot = PersistedSlot(MemoryKeyValueStore({"test-key": "40.5"}), "test-key", 0)
        assert slot.value == 40.5

    def test_stored_boolean(self):
        slot = PersistedSlot(MemoryKeyValueStore({"test-key": "true"}), "test-key", False)
        assert slot.value is True

    def test_stored_object(self):
        stored = json.dumps({"name": "test", "value": 123})
        slot = PersistedSlot(MemoryKeyValueStore({"test-key": stored}), "test-key", {})
        assert slot.value == {"name": "test", "value": 123}

    def test_stored_array(self):
        slot = PersistedSlot(MemoryKeyValueStore({"test-key": "[1, 2, 3]"}), "test-key", [])
        assert slot.value == [1, 2, 3]

    def test_invalid_json_falls_back(self):
        slot = PersistedSlot(MemoryKeyValueStore({"test-key": "invalid-json"}), "test-key", {"default": True})
        assert slot.value == {"default": True}

    @pytest.mark.parametrize("raw", ["abc", "", "NaN", "Infinity", "12abc"])
    def test_malformed_number_falls_back(self, raw):
        """Corrupt numeric slot loads the documented default."""
        slot = PersistedSlot(MemoryKeyValueStore({"dailyCalories": raw}), "dailyCalories", 2000)
        assert slot.value == 2000

    def test_non_boolean_json_falls_back(self):
        slot = PersistedSlot(MemoryKeyValueStore({"flag": "1"}), "flag", False)
        assert slot.value is False

    def test_read_exception_falls_back(self):
        """A store that raises on read does not propagate."""
        failing = MagicMock()
        failing.read.side_effect = RuntimeError("storage unavailable")
        slot = PersistedSlot(failing, "test-key", 7)
        assert slot.value == 7


class TestSlotUpdates:
    """Tests for PersistedSlot.set."""

    def test_string_written_plain(self, store):
        slot = PersistedSlot(store, "test-key", "default")
        slot.set("new-value")
        assert slot.value == "new-value"
        assert store.data["test-key"] == "new-value"

    def test_number_written_as_decimal(self, store):
        slot = PersistedSlot(store, "test-key", 0)
        slot.set(42)
        assert store.data["test-key"] == "42"
        slot.set(2500.0)
        assert store.data["test-key"] == "2500"
        slot.set(40.5)
        assert store.data["test-key"] == "40.5"

    def test_boolean_written_as_json(self, store):
        slot = PersistedSlot(store, "test-key", False)
        slot.set(True)
        assert store.data["test-key"] == "true"

    def test_object_written_as_json(self, store):
        slot = PersistedSlot(store, "test-key", {})
        slot.set({"a": 1})
        assert json.loads(store.data["test-key"]) == {"a": 1}

    def test_value_survives_reload(self, store):
        PersistedSlot(store, "test-key", 0).set(1800)
        assert PersistedSlot(store, "test-key", 0).value == 1800

    def test_write_exception_is_swallowed(self):
        """Quota-style failures are logged and the in-memory value still updates."""
        failing = MagicMock()
        failing.read.return_value = None
        failing.write.side_effect = OSError("quota exceeded")
        slot = PersistedSlot(failing, "test-key", "default")

        slot.set("new-value")

        assert slot.value == "new-value"
        failing.write.assert_called_once_with("test-key", "new-value")

    def test_write_false_is_logged(self, caplog):
        failing = MagicMock()
        failing.read.return_value = None
        failing.write.return_value = False
        slot = PersistedSlot(failing, "test-key", 0)

        slot.set(5)

        assert slot.value == 5
        assert "Failed to save test-key" in caplog.text


class TestModelListCodec:
    """Tests for typed lists of models."""

    def test_meals_round_trip(self, store):
        slot = PersistedSlot(store, "meals", [], ModelListCodec(Meal))
        meal = Meal(name="Lunch", carbs=50, protein=20, fat=15)
        slot.set([meal])

        reloaded = PersistedSlot(store, "meals", [], ModelListCodec(Meal))
        assert reloaded.value == [meal]

    def test_invalid_entries_fall_back(self):
        raw = json.dumps([{"id": "1", "name": "Lunch", "carbs": "lots"}])
        slot = PersistedSlot(MemoryKeyValueStore({"meals": raw}), "meals", [], ModelListCodec(Meal))
        assert slot.value == []


class TestFileKeyValueStore:
    """Tests for FileKeyValueStore."""

    def test_missing_file_reads_empty(self, tmp_path):
        store = FileKeyValueStore(tmp_path / "state.json")
        assert store.read("dailyCalories") is None

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "state.json"
        store = FileKeyValueStore(path)

        assert store.write("dailyCalories", "1800")
        assert store.write("macroPreset", "keto")

        assert FileKeyValueStore(path).read("dailyCalories") == "1800"
        assert json.loads(path.read_text()) == {"dailyCalories": "1800", "macroPreset": "keto"}

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        assert FileKeyValueStore(path).read("dailyCalories") is None

    def test_write_failure_returns_false(self, tmp_path):
        """Writing under a path that is a file fails without raising."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = FileKeyValueStore(blocker / "state.json")
        assert store.write("dailyCalories", "1800") is False


class TestCreateStore:
    """Tests for create_store."""

    def test_memory_by_default(self):
        assert isinstance(create_store(), MemoryKeyValueStore)

    def test_file_when_path_set(self, tmp_path):
        store = create_store(StorageConfig(path=str(tmp_path / "s.json")))
        assert isinstance(store, FileKeyValueStore)
