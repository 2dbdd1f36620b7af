# stacksprint/core/config_store.py
"""
Configuration Store
- Holds the ConfigurationState of one session and exposes one mutator per
  field group (scalars, toggle groups, services, schema models, custom files,
  folder/file text lists, root settings).
- Derives the canonical GenerationRequest from the state. Derivation is a
  pure function of the state, so equal states give equal payloads.
- Notifies subscribers with the freshly derived payload after every mutation.
  It never talks to the network itself.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from stacksprint.models import (
    DEFAULT_FRAMEWORK,
    MAX_SERVICES,
    ConfigurationState,
    CustomFileEntry,
    CustomOptions,
    FeatureOptions,
    FileToggleOptions,
    GenerationRequest,
    InfraOptions,
    PresetSnapshot,
    RootSettings,
    SchemaField,
    SchemaModel,
    Service,
    blank_custom_files,
    default_schema_models,
    default_services,
)
from stacksprint.utils.file_helpers import join_csv, parse_csv

logger = logging.getLogger(__name__)

PayloadListener = Callable[[GenerationRequest], None]
M = TypeVar("M", bound=BaseModel)


def _coerce(model: Type[M], value: Union[M, Dict[str, Any]]) -> M:
    if isinstance(value, model):
        return value.model_copy(deep=True)
    return model.model_validate(value)


def _coerce_list(model: Type[M], values: List[Any]) -> List[M]:
    return [_coerce(model, v) for v in values]


def _patched(item: M, patch: Dict[str, Any]) -> M:
    merged = item.model_dump()
    merged.update(patch)
    return type(item).model_validate(merged)


def _check_index(items: List[Any], index: int, what: str) -> None:
    if index < 0 or index >= len(items):
        raise IndexError(f"{what} index {index} out of range (0..{len(items) - 1})")


def build_payload(state: ConfigurationState) -> GenerationRequest:
    """
    Flatten the raw session state into the canonical request body.

    - services are only sent for the microservices architecture; stored
      services survive in the state for later re-enabling
    - comma-separated text lists are split, trimmed and emptied segments dropped
    - custom files without a path, schema models without a name and fields
      without a name are dropped; remaining names and paths are trimmed
    """
    if state.architecture == "microservices":
        services = [Service(name=s.name, port=s.port) for s in state.services]
    else:
        services = []

    models = []
    for model in state.schema_models:
        name = model.name.strip()
        if not name:
            continue
        fields = [
            SchemaField(name=f.name.strip(), type=f.type.strip())
            for f in model.fields
            if f.name.strip()
        ]
        models.append(SchemaModel(name=name, fields=fields))

    add_files = [
        CustomFileEntry(path=entry.path.strip(), content=entry.content)
        for entry in state.custom_file_entries
        if entry.path.strip()
    ]

    custom = CustomOptions(
        add_folders=parse_csv(state.custom_folders),
        remove_folders=parse_csv(state.remove_folders),
        remove_files=parse_csv(state.remove_files),
        add_files=add_files,
        models=models,
    )

    return GenerationRequest(
        language=state.language,
        framework=state.framework,
        architecture=state.architecture,
        services=services,
        db=state.db,
        use_orm=state.use_orm,
        service_communication=state.service_communication,
        infra=state.infra.model_copy(),
        features=state.features.model_copy(),
        file_toggles=state.file_toggles.model_copy(),
        custom=custom,
        root=state.root.model_copy(),
    )


def state_from_snapshot(snapshot: PresetSnapshot) -> ConfigurationState:
    """
    Build a complete state from a (possibly sparse) snapshot.

    Omitted fields take the session-start defaults, never the current values.
    An empty or omitted service list restores the two default services; an
    omitted model list restores the default model while an explicit empty
    list stays empty.
    """
    defaults = ConfigurationState()
    custom = snapshot.custom
    root = snapshot.root

    services = snapshot.services if snapshot.services else default_services()
    if custom is not None and custom.models is not None:
        schema_models = [m.model_copy(deep=True) for m in custom.models]
    else:
        schema_models = default_schema_models()
    if custom is not None and custom.add_files:
        custom_files = [f.model_copy() for f in custom.add_files]
    else:
        custom_files = blank_custom_files()

    return ConfigurationState(
        language=snapshot.language or defaults.language,
        framework=snapshot.framework or defaults.framework,
        architecture=snapshot.architecture or defaults.architecture,
        db=snapshot.db or defaults.db,
        use_orm=defaults.use_orm if snapshot.use_orm is None else snapshot.use_orm,
        service_communication=snapshot.service_communication or defaults.service_communication,
        services=[s.model_copy() for s in services[:MAX_SERVICES]],
        infra=snapshot.infra.model_copy() if snapshot.infra else defaults.infra,
        features=snapshot.features.model_copy() if snapshot.features else defaults.features,
        file_toggles=snapshot.file_toggles.model_copy() if snapshot.file_toggles else defaults.file_toggles,
        root=root.model_copy() if root else defaults.root,
        custom_folders=join_csv(custom.add_folders) if custom else "",
        remove_folders=join_csv(custom.remove_folders) if custom else "",
        remove_files=join_csv(custom.remove_files) if custom else "",
        schema_models=schema_models,
        custom_file_entries=custom_files,
    )


class ConfigStore:
    def __init__(self, state: Optional[ConfigurationState] = None):
        self._state = state.model_copy(deep=True) if state is not None else ConfigurationState()
        self._listeners: List[PayloadListener] = []

    # ----------------------------
    # Observation
    # ----------------------------
    def subscribe(self, listener: PayloadListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _commit(self, state: ConfigurationState) -> None:
        self._state = state
        payload = self.derive_payload()
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Payload listener failed")

    def _replace(self, **fields: Any) -> None:
        self._commit(self._state.model_copy(update=fields))

    # ----------------------------
    # Read side
    # ----------------------------
    @property
    def state(self) -> ConfigurationState:
        return self._state.model_copy(deep=True)

    def derive_payload(self) -> GenerationRequest:
        return build_payload(self._state)

    # ----------------------------
    # Scalar mutators
    # ----------------------------
    def set_language(self, language: str) -> None:
        self._replace(language=language)

    def select_language(self, language: str, framework: Optional[str] = None) -> None:
        """Switch language and framework together; framework defaults per language."""
        fw = framework or DEFAULT_FRAMEWORK.get(language, self._state.framework)
        self._replace(language=language, framework=fw)

    def set_framework(self, framework: str) -> None:
        self._replace(framework=framework)

    def set_architecture(self, architecture: str) -> None:
        self._replace(architecture=architecture)

    def set_db(self, db: str) -> None:
        self._replace(db=db)

    def set_use_orm(self, use_orm: bool) -> None:
        self._replace(use_orm=bool(use_orm))

    def set_service_communication(self, mode: str) -> None:
        self._replace(service_communication=mode)

    # ----------------------------
    # Toggle groups (full replacement)
    # ----------------------------
    def set_infra(self, infra: Union[InfraOptions, Dict[str, bool]]) -> None:
        self._replace(infra=_coerce(InfraOptions, infra))

    def set_features(self, features: Union[FeatureOptions, Dict[str, bool]]) -> None:
        self._replace(features=_coerce(FeatureOptions, features))

    def set_file_toggles(self, toggles: Union[FileToggleOptions, Dict[str, bool]]) -> None:
        self._replace(file_toggles=_coerce(FileToggleOptions, toggles))

    # ----------------------------
    # Root initialization
    # ----------------------------
    def set_root(self, root: Union[RootSettings, Dict[str, Any]]) -> None:
        self._replace(root=_coerce(RootSettings, root))

    def _set_root_field(self, **fields: Any) -> None:
        self._replace(root=_patched(self._state.root, fields))

    def set_root_mode(self, mode: str) -> None:
        self._set_root_field(mode=mode)

    def set_root_name(self, name: str) -> None:
        self._set_root_field(name=name)

    def set_root_path(self, path: str) -> None:
        self._set_root_field(path=path)

    def set_module_name(self, module: str) -> None:
        self._set_root_field(module=module)

    def set_git_init(self, git_init: bool) -> None:
        self._set_root_field(git_init=bool(git_init))

    # ----------------------------
    # Free-text path lists
    # ----------------------------
    def set_custom_folders(self, text: str) -> None:
        self._replace(custom_folders=text)

    def set_remove_folders(self, text: str) -> None:
        self._replace(remove_folders=text)

    def set_remove_files(self, text: str) -> None:
        self._replace(remove_files=text)

    # ----------------------------
    # Services (clamped to MAX_SERVICES)
    # ----------------------------
    def set_services(self, services: List[Union[Service, Dict[str, Any]]]) -> None:
        coerced = _coerce_list(Service, services)
        if len(coerced) > MAX_SERVICES:
            logger.debug("Clamping %d services to %d", len(coerced), MAX_SERVICES)
        self._replace(services=coerced[:MAX_SERVICES])

    def add_service(self) -> bool:
        count = len(self._state.services)
        if count >= MAX_SERVICES:
            return False
        nxt = count + 1
        self._replace(services=self._state.services + [Service(name=f"service-{nxt}", port=8080 + nxt)])
        return True

    def update_service(self, index: int, patch: Dict[str, Any]) -> None:
        services = list(self._state.services)
        _check_index(services, index, "service")
        services[index] = _patched(services[index], patch)
        self._replace(services=services)

    def remove_service(self, index: int) -> None:
        services = list(self._state.services)
        _check_index(services, index, "service")
        del services[index]
        self._replace(services=services)

    # ----------------------------
    # Schema models
    # ----------------------------
    def set_schema_models(self, models: List[Union[SchemaModel, Dict[str, Any]]]) -> None:
        self._replace(schema_models=_coerce_list(SchemaModel, models))

    def add_schema_model(self) -> None:
        blank = SchemaModel(name="", fields=[SchemaField(name="name", type="string")])
        self._replace(schema_models=self._state.schema_models + [blank])

    def update_schema_model(self, index: int, patch: Dict[str, Any]) -> None:
        models = list(self._state.schema_models)
        _check_index(models, index, "model")
        models[index] = _patched(models[index], patch)
        self._replace(schema_models=models)

    def remove_schema_model(self, index: int) -> None:
        models = list(self._state.schema_models)
        _check_index(models, index, "model")
        if len(models) == 1:
            models = [SchemaModel(name="", fields=[SchemaField(name="name", type="string")])]
        else:
            del models[index]
        self._replace(schema_models=models)

    def add_model_field(self, model_index: int) -> None:
        models = list(self._state.schema_models)
        _check_index(models, model_index, "model")
        model = models[model_index]
        models[model_index] = model.model_copy(update={"fields": model.fields + [SchemaField(name="", type="string")]})
        self._replace(schema_models=models)

    def update_model_field(self, model_index: int, field_index: int, patch: Dict[str, Any]) -> None:
        models = list(self._state.schema_models)
        _check_index(models, model_index, "model")
        fields = list(models[model_index].fields)
        _check_index(fields, field_index, "field")
        fields[field_index] = _patched(fields[field_index], patch)
        models[model_index] = models[model_index].model_copy(update={"fields": fields})
        self._replace(schema_models=models)

    def remove_model_field(self, model_index: int, field_index: int) -> None:
        models = list(self._state.schema_models)
        _check_index(models, model_index, "model")
        fields = list(models[model_index].fields)
        _check_index(fields, field_index, "field")
        if len(fields) == 1:
            fields = [SchemaField(name="", type="string")]
        else:
            del fields[field_index]
        models[model_index] = models[model_index].model_copy(update={"fields": fields})
        self._replace(schema_models=models)

    # ----------------------------
    # Custom files
    # ----------------------------
    def set_custom_file_entries(self, entries: List[Union[CustomFileEntry, Dict[str, Any]]]) -> None:
        self._replace(custom_file_entries=_coerce_list(CustomFileEntry, entries))

    def add_custom_file_row(self) -> None:
        self._replace(custom_file_entries=self._state.custom_file_entries + [CustomFileEntry()])

    def update_custom_file(self, index: int, patch: Dict[str, Any]) -> None:
        entries = list(self._state.custom_file_entries)
        _check_index(entries, index, "custom file")
        entries[index] = _patched(entries[index], patch)
        self._replace(custom_file_entries=entries)

    def remove_custom_file_row(self, index: int) -> None:
        entries = list(self._state.custom_file_entries)
        _check_index(entries, index, "custom file")
        if len(entries) == 1:
            entries = blank_custom_files()
        else:
            del entries[index]
        self._replace(custom_file_entries=entries)

    # ----------------------------
    # Presets
    # ----------------------------
    def apply_preset(self, config: Union[PresetSnapshot, Dict[str, Any]]) -> None:
        """Replace the whole state from a snapshot in a single change."""
        snapshot = config if isinstance(config, PresetSnapshot) else PresetSnapshot.model_validate(config)
        self._commit(state_from_snapshot(snapshot))
