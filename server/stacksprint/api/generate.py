# stacksprint/api/generate.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from stacksprint.api.deps import get_session
from stacksprint.core.session import WorkbenchSession
from stacksprint.utils.config import BASH_SCRIPT_FILENAME, POWERSHELL_SCRIPT_FILENAME

router = APIRouter()

DOWNLOAD_NAMES = {
    "bash": BASH_SCRIPT_FILENAME,
    "powershell": POWERSHELL_SCRIPT_FILENAME,
}


@router.post("", response_model=Dict[str, Any])
async def generate(session: WorkbenchSession = Depends(get_session)):
    """
    Manual generation: bypasses the preview debounce and returns the view once
    the call has settled. `applied` is False when the call failed or a newer
    response had already been shown.
    """
    applied = await session.scheduler.trigger_manual()
    return {"applied": applied, "preview": session.view.as_dict()}


@router.get("/preview", response_model=Dict[str, Any])
async def get_preview(session: WorkbenchSession = Depends(get_session)):
    return session.view.as_dict()


@router.get("/notifications", response_model=List[Dict[str, Any]])
async def drain_notifications(session: WorkbenchSession = Depends(get_session)):
    return [n.model_dump() for n in session.notifier.drain()]


@router.get("/download/{variant}")
async def download_script(variant: str, session: WorkbenchSession = Depends(get_session)):
    filename = DOWNLOAD_NAMES.get(variant)
    if filename is None:
        raise HTTPException(status_code=404, detail=f"unknown script variant {variant!r}")
    content = session.view.script(variant)
    if not content:
        raise HTTPException(status_code=404, detail="no script generated yet")
    session.notifier.push("info", f"Downloaded {filename}")
    return PlainTextResponse(
        content,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
