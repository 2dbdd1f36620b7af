from fastapi import HTTPException, Request

from stacksprint.core.session import WorkbenchSession


def get_session(request: Request) -> WorkbenchSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="workbench session is not initialised")
    return session
