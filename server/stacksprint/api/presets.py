# stacksprint/api/presets.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from stacksprint.api.deps import get_session
from stacksprint.core.preset_repository import PresetNotFoundError, PresetValidationError
from stacksprint.core.quickstart import QUICKSTART_PRESETS, get_quickstart
from stacksprint.core.session import WorkbenchSession

router = APIRouter()
quickstart_router = APIRouter()


class SavePresetRequest(BaseModel):
    name: str


@router.get("", response_model=List[Dict[str, Any]])
async def list_presets(session: WorkbenchSession = Depends(get_session)):
    return [p.model_dump() for p in session.presets.list()]


@router.post("", response_model=Dict[str, Any])
async def save_preset(req: SavePresetRequest, session: WorkbenchSession = Depends(get_session)):
    try:
        preset = session.presets.save(req.name, session.store.derive_payload())
    except PresetValidationError as e:
        session.notifier.push("error", str(e))
        raise HTTPException(status_code=400, detail=str(e))
    session.notifier.push("success", f'Saved preset "{preset.name}"')
    return preset.model_dump()


@router.get("/{name}", response_model=Dict[str, Any])
async def get_preset(name: str, session: WorkbenchSession = Depends(get_session)):
    preset = session.presets.find(name)
    if preset is None:
        raise HTTPException(status_code=404, detail=f"preset {name!r} not found")
    return preset.model_dump()


@router.post("/{name}/load", response_model=Dict[str, Any])
async def load_preset(name: str, session: WorkbenchSession = Depends(get_session)):
    try:
        session.presets.restore(name, session.store)
    except PresetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PresetValidationError as e:
        session.notifier.push("error", str(e))
        raise HTTPException(status_code=400, detail=str(e))
    session.notifier.push("info", f'Loaded preset "{name}"')
    return {"config": session.store.state.model_dump()}


@router.delete("/{name}", response_model=Dict[str, Any])
async def delete_preset(name: str, session: WorkbenchSession = Depends(get_session)):
    deleted = session.presets.delete(name)
    if deleted:
        session.notifier.push("info", f'Deleted preset "{name}"')
    return {"deleted": deleted}


# --- built-in quick start tiles ---
@quickstart_router.get("", response_model=List[Dict[str, Any]])
async def list_quickstart():
    return QUICKSTART_PRESETS


@quickstart_router.post("/{name}", response_model=Dict[str, Any])
async def apply_quickstart(name: str, session: WorkbenchSession = Depends(get_session)):
    snapshot = get_quickstart(name)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"quick start {name!r} not found")
    session.store.apply_preset(snapshot)
    session.notifier.push("info", f'Applied quick start "{name}"')
    return {"config": session.store.state.model_dump()}
