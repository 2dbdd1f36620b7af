# stacksprint/api/config.py
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, ValidationError

from stacksprint.api.deps import get_session
from stacksprint.core.session import WorkbenchSession
from stacksprint.core.validation import validate_state
from stacksprint.models import (
    ARCHITECTURES,
    DATABASES,
    DEFAULT_FRAMEWORK,
    FEATURE_LABELS,
    FIELD_TYPES,
    FILE_TOGGLE_LABELS,
    FRAMEWORKS_BY_LANGUAGE,
    INFRA_LABELS,
    LANGUAGES,
    MAX_SERVICES,
    SERVICE_COMMUNICATION,
    CustomFileEntry,
    FeatureOptions,
    FileToggleOptions,
    InfraOptions,
    RootSettings,
    SchemaModel,
    Service,
)

router = APIRouter()


class RootPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: Optional[Literal["new", "existing"]] = None
    name: Optional[str] = None
    path: Optional[str] = None
    git_init: Optional[bool] = None
    module: Optional[str] = None


class ConfigUpdate(BaseModel):
    """Partial update; every field present replaces that field group."""

    model_config = ConfigDict(extra="forbid")

    language: Optional[str] = None
    framework: Optional[str] = None
    architecture: Optional[str] = None
    db: Optional[str] = None
    use_orm: Optional[bool] = None
    service_communication: Optional[str] = None
    services: Optional[List[Service]] = None
    infra: Optional[InfraOptions] = None
    features: Optional[FeatureOptions] = None
    file_toggles: Optional[FileToggleOptions] = None
    root: Optional[RootPatch] = None
    custom_folders: Optional[str] = None
    remove_folders: Optional[str] = None
    remove_files: Optional[str] = None
    schema_models: Optional[List[SchemaModel]] = None
    custom_file_entries: Optional[List[CustomFileEntry]] = None


class ServicePatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    port: Optional[int] = None


class ModelPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None


class FieldPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    type: Optional[str] = None


class CustomFilePatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: Optional[str] = None
    content: Optional[str] = None


def _config_response(session: WorkbenchSession) -> Dict[str, Any]:
    state = session.store.state
    return {"config": state.model_dump(), "errors": validate_state(state)}


def _patch_dict(patch: BaseModel) -> Dict[str, Any]:
    return patch.model_dump(exclude_none=True)


@router.get("/options", response_model=Dict[str, Any])
async def get_options():
    return {
        "languages": LANGUAGES,
        "frameworks": FRAMEWORKS_BY_LANGUAGE,
        "default_framework": DEFAULT_FRAMEWORK,
        "architectures": ARCHITECTURES,
        "databases": DATABASES,
        "service_communication": SERVICE_COMMUNICATION,
        "field_types": FIELD_TYPES,
        "max_services": MAX_SERVICES,
        "infra": INFRA_LABELS,
        "features": FEATURE_LABELS,
        "file_toggles": FILE_TOGGLE_LABELS,
    }


@router.get("", response_model=Dict[str, Any])
async def get_config(session: WorkbenchSession = Depends(get_session)):
    return _config_response(session)


@router.get("/payload", response_model=Dict[str, Any])
async def get_payload(session: WorkbenchSession = Depends(get_session)):
    return session.store.derive_payload().model_dump(mode="json")


@router.get("/errors", response_model=Dict[str, str])
async def get_errors(session: WorkbenchSession = Depends(get_session)):
    return validate_state(session.store.state)


@router.patch("", response_model=Dict[str, Any])
async def update_config(update: ConfigUpdate, session: WorkbenchSession = Depends(get_session)):
    store = session.store
    fields = update.model_dump(exclude_unset=True)
    # resolve the merged root first so a bad body leaves the session untouched
    root = None
    if update.root is not None:
        merged = store.state.root.model_dump()
        merged.update(update.root.model_dump(exclude_none=True))
        try:
            root = RootSettings.model_validate(merged)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))

    try:
        if fields.get("language") is not None:
            store.select_language(fields["language"], fields.get("framework"))
        elif fields.get("framework") is not None:
            store.set_framework(fields["framework"])
        if fields.get("architecture") is not None:
            store.set_architecture(fields["architecture"])
        if fields.get("db") is not None:
            store.set_db(fields["db"])
        if fields.get("use_orm") is not None:
            store.set_use_orm(fields["use_orm"])
        if fields.get("service_communication") is not None:
            store.set_service_communication(fields["service_communication"])
        if update.services is not None:
            store.set_services(update.services)
        if update.infra is not None:
            store.set_infra(update.infra)
        if update.features is not None:
            store.set_features(update.features)
        if update.file_toggles is not None:
            store.set_file_toggles(update.file_toggles)
        if root is not None:
            store.set_root(root)
        if update.custom_folders is not None:
            store.set_custom_folders(update.custom_folders)
        if update.remove_folders is not None:
            store.set_remove_folders(update.remove_folders)
        if update.remove_files is not None:
            store.set_remove_files(update.remove_files)
        if update.schema_models is not None:
            store.set_schema_models(update.schema_models)
        if update.custom_file_entries is not None:
            store.set_custom_file_entries(update.custom_file_entries)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _config_response(session)


# --- services ---
@router.post("/services", response_model=Dict[str, Any])
async def add_service(session: WorkbenchSession = Depends(get_session)):
    if not session.store.add_service():
        raise HTTPException(status_code=409, detail=f"at most {MAX_SERVICES} services are allowed")
    return _config_response(session)


@router.patch("/services/{index}", response_model=Dict[str, Any])
async def update_service(index: int, patch: ServicePatch, session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.update_service(index, _patch_dict(patch))
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)


@router.delete("/services/{index}", response_model=Dict[str, Any])
async def remove_service(index: int, session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.remove_service(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)


# --- schema models ---
@router.post("/models", response_model=Dict[str, Any])
async def add_model(session: WorkbenchSession = Depends(get_session)):
    session.store.add_schema_model()
    return _config_response(session)


@router.patch("/models/{index}", response_model=Dict[str, Any])
async def update_model(index: int, patch: ModelPatch, session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.update_schema_model(index, _patch_dict(patch))
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)


@router.delete("/models/{index}", response_model=Dict[str, Any])
async def remove_model(index: int, session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.remove_schema_model(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)


@router.post("/models/{index}/fields", response_model=Dict[str, Any])
async def add_model_field(index: int, session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.add_model_field(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)


@router.patch("/models/{index}/fields/{field_index}", response_model=Dict[str, Any])
async def update_model_field(index: int, field_index: int, patch: FieldPatch,
                             session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.update_model_field(index, field_index, _patch_dict(patch))
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)


@router.delete("/models/{index}/fields/{field_index}", response_model=Dict[str, Any])
async def remove_model_field(index: int, field_index: int, session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.remove_model_field(index, field_index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)


# --- custom files ---
@router.post("/custom-files", response_model=Dict[str, Any])
async def add_custom_file(session: WorkbenchSession = Depends(get_session)):
    session.store.add_custom_file_row()
    return _config_response(session)


@router.patch("/custom-files/{index}", response_model=Dict[str, Any])
async def update_custom_file(index: int, patch: CustomFilePatch, session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.update_custom_file(index, _patch_dict(patch))
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)


@router.delete("/custom-files/{index}", response_model=Dict[str, Any])
async def remove_custom_file(index: int, session: WorkbenchSession = Depends(get_session)):
    try:
        session.store.remove_custom_file_row(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _config_response(session)
