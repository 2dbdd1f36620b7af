"""
Unit Tests for PresetRepository
===============================

Persistence, ordering, overwrite-by-name and corrupt storage handling.
"""

import json
from unittest.mock import patch

import pytest

from stacksprint.core.config_store import ConfigStore
from stacksprint.core.preset_repository import (
    PresetNotFoundError,
    PresetRepository,
    PresetValidationError,
)
from stacksprint.utils.config import PRESET_STORAGE_KEY
from stacksprint.utils.storage import JsonFileStore, MemoryStore


@pytest.fixture
def repo():
    return PresetRepository(MemoryStore())


class TestSaveAndList:
    def test_blank_name_rejected(self, repo, store):
        with pytest.raises(PresetValidationError):
            repo.save("   ", store.derive_payload())
        assert repo.list() == []

    def test_most_recent_first(self, repo, store):
        repo.save("one", store.derive_payload())
        repo.save("two", store.derive_payload())
        assert [p.name for p in repo.list()] == ["two", "one"]

    def test_name_is_trimmed(self, repo, store):
        repo.save("  go-clean-pg  ", store.derive_payload())
        assert repo.find("go-clean-pg") is not None

    def test_overwrite_keeps_single_entry_with_second_snapshot(self, repo, store):
        repo.save("x", store.derive_payload())
        repo.save("other", store.derive_payload())
        store.set_db("mysql")
        repo.save("x", store.derive_payload())
        presets = repo.list()
        assert [p.name for p in presets] == ["x", "other"]
        assert presets[0].config["db"] == "mysql"

    def test_stored_format(self, store):
        storage = MemoryStore()
        PresetRepository(storage).save("x", store.derive_payload())
        raw = json.loads(storage.get(PRESET_STORAGE_KEY))
        assert isinstance(raw, list)
        assert raw[0]["name"] == "x"
        assert raw[0]["version"] == 1
        assert raw[0]["config"]["language"] == "go"


class TestLoadAndDelete:
    def test_round_trip_reproduces_payload(self, repo):
        source = ConfigStore()
        source.set_architecture("microservices")
        source.set_services([{"name": "auth", "port": 8081}, {"name": "user", "port": 8082}])
        source.set_schema_models([])
        source.set_custom_folders("")
        payload = source.derive_payload()
        repo.save("x", payload)

        target = ConfigStore()
        target.set_db("mongodb")
        repo.restore("x", target)
        assert target.derive_payload() == payload

    def test_microservices_preset_without_services_restores_defaults(self, repo):
        source = ConfigStore()
        source.set_architecture("microservices")
        source.set_services([])
        repo.save("bare", source.derive_payload())
        assert repo.find("bare").config["services"] == []

        target = ConfigStore()
        repo.restore("bare", target)
        services = target.derive_payload().services
        assert [(s.name, s.port) for s in services] == [("users", 8081), ("orders", 8082)]

    def test_round_trip_with_empty_lists_outside_microservices(self, repo):
        source = ConfigStore()
        source.set_services([])
        source.set_schema_models([])
        payload = source.derive_payload()
        repo.save("empty", payload)

        target = ConfigStore()
        target.apply_preset(repo.load("empty"))
        assert target.derive_payload() == payload

    def test_load_missing_raises_not_found(self, repo):
        with pytest.raises(PresetNotFoundError):
            repo.load("nope")

    def test_delete_missing_is_noop(self, repo, store):
        repo.save("keep", store.derive_payload())
        assert repo.delete("nope") is False
        assert [p.name for p in repo.list()] == ["keep"]
        assert repo.delete("keep") is True
        assert repo.list() == []

    def test_newer_version_rejected(self):
        storage = MemoryStore({PRESET_STORAGE_KEY: json.dumps([{"name": "future", "version": 2, "config": {}}])})
        with pytest.raises(PresetValidationError):
            PresetRepository(storage).load("future")

    def test_legacy_entry_without_version_loads(self):
        legacy = [{"name": "old", "config": {"language": "node", "framework": "express"}}]
        storage = MemoryStore({PRESET_STORAGE_KEY: json.dumps(legacy)})
        snapshot = PresetRepository(storage).load("old")
        assert snapshot.language == "node"

    def test_unknown_snapshot_field_rejected(self):
        bad = [{"name": "bad", "config": {"database": "postgresql"}}]
        storage = MemoryStore({PRESET_STORAGE_KEY: json.dumps(bad)})
        with pytest.raises(PresetValidationError):
            PresetRepository(storage).load("bad")


class TestCorruptStorage:
    @pytest.mark.parametrize("raw", ["{not json", '{"name": "x"}', "42", "null"])
    def test_corrupt_data_reads_as_empty(self, raw):
        repo = PresetRepository(MemoryStore({PRESET_STORAGE_KEY: raw}))
        assert repo.list() == []

    def test_malformed_entries_are_skipped(self):
        raw = json.dumps([{"name": "ok", "config": {}}, "junk", {"config": {}}])
        repo = PresetRepository(MemoryStore({PRESET_STORAGE_KEY: raw}))
        assert [p.name for p in repo.list()] == ["ok"]

    def test_save_over_corrupt_data_recovers(self, store):
        storage = MemoryStore({PRESET_STORAGE_KEY: "garbage"})
        repo = PresetRepository(storage)
        repo.save("fresh", store.derive_payload())
        assert [p.name for p in repo.list()] == ["fresh"]


class TestJsonFileStore:
    def test_persists_across_instances(self, tmp_path, store):
        path = str(tmp_path / "presets.json")
        PresetRepository(JsonFileStore(path)).save("x", store.derive_payload())
        assert [p.name for p in PresetRepository(JsonFileStore(path)).list()] == ["x"]

    def test_unreadable_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text("{{{", encoding="utf-8")
        assert PresetRepository(JsonFileStore(str(path))).list() == []

    def test_failed_write_keeps_file_and_removes_temp(self, tmp_path):
        path = tmp_path / "presets.json"
        store = JsonFileStore(str(path))
        store.set("k", "old")
        with patch("stacksprint.utils.storage.json.dump", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                store.set("k", "new")
        assert not (tmp_path / "presets.json.tmp").exists()
        assert store.get("k") == "old"
