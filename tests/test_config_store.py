"""
Unit Tests for ConfigStore
==========================

Payload derivation, mutator semantics and preset application.
"""

import pytest

from stacksprint.core.config_store import ConfigStore, build_payload
from stacksprint.models import ConfigurationState, PresetSnapshot, Service


class TestPayloadDerivation:
    """Canonical payload built from the raw session state"""

    def test_equal_states_give_equal_payloads(self):
        a = ConfigStore()
        b = ConfigStore()
        for s in (a, b):
            s.set_architecture("microservices")
            s.set_custom_folders("internal/payments, scripts")
        assert a.derive_payload() == b.derive_payload()
        assert a.derive_payload().model_dump_json() == b.derive_payload().model_dump_json()

    def test_mvp_defaults_scenario(self, store):
        payload = store.derive_payload()
        assert payload.architecture == "mvp"
        assert payload.infra.model_dump() == {"redis": False, "kafka": False, "nats": False}
        assert payload.services == []

    def test_services_gated_by_architecture(self, store):
        store.set_services([{"name": "a", "port": 1}, {"name": "b", "port": 2}, {"name": "c", "port": 3}])
        for arch in ("mvp", "clean", "hexagonal", "modular-monolith"):
            store.set_architecture(arch)
            assert store.derive_payload().services == []
        # stored services survive the gating
        assert len(store.state.services) == 3

    def test_microservices_scenario(self, store):
        store.set_architecture("microservices")
        store.set_services([{"name": "auth", "port": 8081}, {"name": "user", "port": 8082}])
        store.set_service_communication("grpc")
        payload = store.derive_payload()
        assert payload.services == [Service(name="auth", port=8081), Service(name="user", port=8082)]
        assert payload.service_communication == "grpc"

    def test_csv_lists_are_trimmed_and_filtered(self, store):
        store.set_custom_folders(" a, b ,,c ")
        store.set_remove_folders("internal/logger,  ")
        store.set_remove_files(" README.md , .env")
        custom = store.derive_payload().custom
        assert custom.add_folders == ["a", "b", "c"]
        assert custom.remove_folders == ["internal/logger"]
        assert custom.remove_files == ["README.md", ".env"]

    def test_custom_files_without_path_are_dropped(self, store):
        store.set_custom_file_entries([
            {"path": "  docs/NOTES.md ", "content": "  keep spacing "},
            {"path": "   ", "content": "orphan"},
        ])
        add_files = store.derive_payload().custom.add_files
        assert len(add_files) == 1
        assert add_files[0].path == "docs/NOTES.md"
        assert add_files[0].content == "  keep spacing "

    def test_models_trimmed_and_blank_entries_dropped(self, store):
        store.set_schema_models([
            {"name": " User ", "fields": [{"name": " email ", "type": "string"}, {"name": " ", "type": "int"}]},
            {"name": "  ", "fields": [{"name": "x", "type": "int"}]},
        ])
        models = store.derive_payload().custom.models
        assert [m.name for m in models] == ["User"]
        assert [f.name for f in models[0].fields] == ["email"]

    def test_payload_has_no_ungated_service_names(self, store):
        dumped = store.derive_payload().model_dump()
        assert set(dumped["custom"]) == {"add_folders", "remove_folders", "remove_files", "add_files", "models"}

    def test_build_payload_is_pure(self):
        state = ConfigurationState(custom_folders="x, y")
        before = state.model_dump()
        build_payload(state)
        assert state.model_dump() == before


class TestMutators:
    """Field-group mutators and index-addressed row editors"""

    def test_listeners_receive_new_payload(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        store.set_db("mysql")
        unsubscribe()
        store.set_db("mongodb")
        assert len(seen) == 1
        assert seen[0].db == "mysql"

    def test_toggle_group_is_fully_replaced(self, store):
        store.set_infra({"redis": True, "kafka": True})
        store.set_infra({"nats": True})
        assert store.state.infra.model_dump() == {"redis": False, "kafka": False, "nats": True}

    def test_select_language_resets_framework(self, store):
        store.select_language("python")
        assert store.state.framework == "fastapi"
        store.select_language("node", "fastify")
        assert store.state.framework == "fastify"

    def test_services_clamped_to_five(self, store):
        store.set_services([{"name": f"s{i}", "port": 9000 + i} for i in range(8)])
        assert len(store.state.services) == 5

    def test_add_service_stops_at_limit(self, store):
        assert store.add_service() is True
        assert store.state.services[-1] == Service(name="service-3", port=8083)
        store.add_service()
        store.add_service()
        assert store.add_service() is False
        assert len(store.state.services) == 5

    def test_update_service_patches_only_that_index(self, store):
        store.update_service(1, {"port": 9999})
        services = store.state.services
        assert services[0] == Service(name="users", port=8081)
        assert services[1] == Service(name="orders", port=9999)

    def test_out_of_range_index_raises(self, store):
        with pytest.raises(IndexError):
            store.update_service(7, {"name": "x"})
        with pytest.raises(IndexError):
            store.remove_custom_file_row(3)

    def test_remove_last_custom_file_leaves_blank_row(self, store):
        store.update_custom_file(0, {"path": "a.txt"})
        store.remove_custom_file_row(0)
        entries = store.state.custom_file_entries
        assert len(entries) == 1 and entries[0].path == "" and entries[0].content == ""

    def test_schema_field_editors(self, store):
        store.add_model_field(0)
        store.update_model_field(0, 2, {"name": "price", "type": "float"})
        fields = store.state.schema_models[0].fields
        assert [f.name for f in fields] == ["id", "name", "price"]
        store.remove_model_field(0, 0)
        assert [f.name for f in store.state.schema_models[0].fields] == ["name", "price"]

    def test_remove_last_model_leaves_blank_model(self, store):
        store.remove_schema_model(0)
        models = store.state.schema_models
        assert len(models) == 1 and models[0].name == ""
        assert store.derive_payload().custom.models == []

    def test_root_setters(self, store):
        store.set_root_mode("existing")
        store.set_root_path("/srv/app")
        store.set_git_init(False)
        root = store.derive_payload().root
        assert (root.mode, root.path, root.git_init) == ("existing", "/srv/app", False)

    def test_state_getter_returns_copy(self, store):
        state = store.state
        state.services.append(Service(name="ghost", port=1))
        assert len(store.state.services) == 2


class TestApplyPreset:
    """Sparse preset snapshots fall back to defaults, never to current values"""

    def test_omitted_fields_use_defaults_not_current_values(self, store):
        store.set_db("mongodb")
        store.set_custom_folders("leftover")
        store.set_infra({"kafka": True})
        store.apply_preset({"language": "python", "framework": "django"})
        state = store.state
        assert state.db == "postgresql"
        assert state.custom_folders == ""
        assert state.infra.kafka is False
        assert (state.language, state.framework) == ("python", "django")

    def test_empty_services_restore_defaults(self, store):
        store.apply_preset({"architecture": "microservices", "services": []})
        assert [s.name for s in store.state.services] == ["users", "orders"]

    def test_explicit_empty_models_stay_empty(self, store):
        store.apply_preset({"custom": {"models": []}})
        assert store.state.schema_models == []
        store.apply_preset({})
        assert store.state.schema_models[0].name == "Item"

    def test_partial_toggle_group_fills_defaults(self, store):
        store.apply_preset({"features": {"jwt_auth": True}})
        features = store.state.features
        assert features.jwt_auth is True
        assert features.swagger is True

    def test_unknown_fields_rejected(self, store):
        with pytest.raises(ValueError):
            store.apply_preset({"useORM": True})

    def test_single_notification_per_apply(self, store):
        seen = []
        store.subscribe(seen.append)
        store.apply_preset(PresetSnapshot(language="node", framework="express"))
        assert len(seen) == 1

    def test_payload_round_trip(self, store):
        store.set_architecture("microservices")
        store.set_services([{"name": "auth", "port": 8081}, {"name": "user", "port": 8082}])
        store.set_custom_folders("a, b")
        store.set_remove_files("README.md")
        store.update_custom_file(0, {"path": "docs/x.md", "content": "hi"})
        payload = store.derive_payload()

        other = ConfigStore()
        other.apply_preset(payload.model_dump())
        assert other.derive_payload() == payload
