"""
Unit Tests for inline validation
================================
"""

import pytest

from stacksprint.core.validation import module_identifier_error, validate_state
from stacksprint.models import ConfigurationState, CustomFileEntry, Service


class TestModuleIdentifier:
    @pytest.mark.parametrize("module,fragment", [
        ("", "required"),
        ("   ", "required"),
        ("github.com/me/my app", "whitespace"),
        ("github.com/Me/app", "lowercase"),
    ])
    def test_rejected(self, module, fragment):
        assert fragment in module_identifier_error(module)

    def test_accepted(self):
        assert module_identifier_error("github.com/me/app") == ""


class TestValidateState:
    def test_defaults_are_clean(self):
        assert validate_state(ConfigurationState()) == {}

    def test_module_checked_only_for_go(self):
        state = ConfigurationState(root={"module": "Bad Module"})
        assert "root.module" in validate_state(state)
        state = ConfigurationState(language="python", framework="fastapi", root={"module": "Bad Module"})
        assert "root.module" not in validate_state(state)

    def test_framework_must_match_language(self):
        errors = validate_state(ConfigurationState(language="node", framework="gin"))
        assert "framework" in errors

    def test_microservice_count(self):
        state = ConfigurationState(architecture="microservices", services=[Service(name="solo", port=8081)])
        assert "services" in validate_state(state)

    def test_service_count_ignored_outside_microservices(self):
        state = ConfigurationState(architecture="clean", services=[])
        assert validate_state(state) == {}

    def test_service_names_and_ports(self):
        state = ConfigurationState(
            architecture="microservices",
            services=[Service(name="1bad", port=8081), Service(name="auth", port=0), Service(name="AUTH", port=8083)],
        )
        errors = validate_state(state)
        assert "services[0].name" in errors
        assert "services[1].port" in errors
        assert "duplicate" in errors["services[2].name"]

    def test_existing_root_needs_path(self):
        errors = validate_state(ConfigurationState(root={"mode": "existing", "path": " "}))
        assert "root.path" in errors

    def test_traversal_paths_flagged(self):
        state = ConfigurationState(
            custom_folders="ok/dir, ../escape",
            remove_files="/etc/passwd",
            custom_file_entries=[CustomFileEntry(path="../x.txt"), CustomFileEntry(path="")],
        )
        errors = validate_state(state)
        assert "../escape" in errors["custom_folders"]
        assert "remove_files" in errors
        assert "custom_file_entries[0].path" in errors
        assert "custom_file_entries[1].path" not in errors

    def test_unknown_field_type(self):
        state = ConfigurationState(schema_models=[{"name": "User", "fields": [{"name": "age", "type": "number"}]}])
        assert "schema_models[0].fields[0].type" in validate_state(state)
