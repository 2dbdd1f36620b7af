# stacksprint/core/validation.py
"""
Inline field validation.

Mirrors the checks the generation service applies so the problems can be
shown next to the offending field before a call is made. Returns a mapping
of field key -> message; an empty mapping means the configuration is clean.
Nothing here blocks mutations or generation calls.
"""
import re
from typing import Dict

from stacksprint.models import (
    ARCHITECTURES,
    DATABASES,
    FIELD_TYPES,
    FRAMEWORKS_BY_LANGUAGE,
    LANGUAGES,
    MAX_SERVICES,
    MIN_MICROSERVICES,
    SERVICE_COMMUNICATION,
    ConfigurationState,
)
from stacksprint.utils.file_helpers import _safe_normalize, parse_csv

SERVICE_NAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")


def module_identifier_error(module: str) -> str:
    if not module.strip():
        return "module name is required for Go projects"
    if re.search(r"\s", module):
        return "module name must not contain whitespace"
    if module != module.lower():
        return "module name must be lowercase"
    return ""


def validate_state(state: ConfigurationState) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if state.language not in LANGUAGES:
        errors["language"] = f"language must be one of: {', '.join(LANGUAGES)}"
    elif state.framework not in FRAMEWORKS_BY_LANGUAGE[state.language]:
        errors["framework"] = f"framework {state.framework!r} is not valid for {state.language}"
    if state.architecture not in ARCHITECTURES:
        errors["architecture"] = f"architecture must be one of: {', '.join(ARCHITECTURES)}"
    if state.db not in DATABASES:
        errors["db"] = f"db must be one of: {', '.join(DATABASES)}"
    if state.service_communication not in SERVICE_COMMUNICATION:
        errors["service_communication"] = f"service communication must be one of: {', '.join(SERVICE_COMMUNICATION)}"

    if state.architecture == "microservices":
        count = len(state.services)
        if count < MIN_MICROSERVICES or count > MAX_SERVICES:
            errors["services"] = f"microservices mode requires {MIN_MICROSERVICES} to {MAX_SERVICES} services"
        seen = set()
        for i, svc in enumerate(state.services):
            name = svc.name.strip()
            if not SERVICE_NAME_RE.match(name):
                errors[f"services[{i}].name"] = "service name must start with a letter and use letters, digits, '-' or '_'"
            elif name.lower() in seen:
                errors[f"services[{i}].name"] = f"duplicate service name {name!r}"
            seen.add(name.lower())
            if svc.port <= 0:
                errors[f"services[{i}].port"] = "port must be a positive number"

    root = state.root
    if root.mode == "new" and not root.name.strip():
        errors["root.name"] = "root name is required when creating a new root folder"
    if root.mode == "existing" and not root.path.strip():
        errors["root.path"] = "root path is required when using an existing root"
    if state.language == "go":
        msg = module_identifier_error(root.module)
        if msg:
            errors["root.module"] = msg

    for key, text in (
        ("custom_folders", state.custom_folders),
        ("remove_folders", state.remove_folders),
        ("remove_files", state.remove_files),
    ):
        bad = [p for p in parse_csv(text) if _safe_normalize(p) is None]
        if bad:
            errors[key] = f"must be relative paths without '..': {', '.join(bad)}"

    for i, entry in enumerate(state.custom_file_entries):
        if entry.path.strip() and _safe_normalize(entry.path) is None:
            errors[f"custom_file_entries[{i}].path"] = "must be a relative path without '..'"

    for i, model in enumerate(state.schema_models):
        for j, field in enumerate(model.fields):
            if field.name.strip() and field.type not in FIELD_TYPES:
                errors[f"schema_models[{i}].fields[{j}].type"] = f"type must be one of: {', '.join(FIELD_TYPES)}"

    return errors
