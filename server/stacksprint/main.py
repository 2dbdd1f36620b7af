import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.config import router as config_router
from .api.generate import router as generate_router
from .api.presets import quickstart_router, router as presets_router
from .core.session import WorkbenchSession
from .utils.config import DEBUG

logging.basicConfig(level=logging.DEBUG if DEBUG else logging.INFO)


def create_app(session: Optional[WorkbenchSession] = None) -> FastAPI:
    session = session or WorkbenchSession()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session.start()
        try:
            yield
        finally:
            session.close()

    app = FastAPI(title="StackSprint Workbench", lifespan=lifespan)
    app.state.session = session
    app.include_router(config_router, prefix="/config")
    app.include_router(presets_router, prefix="/presets")
    app.include_router(quickstart_router, prefix="/quickstart")
    app.include_router(generate_router, prefix="/generate")
    return app


app = create_app()
