from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from clouddedup.api.errors import register_exception_handlers
from clouddedup.api.routes.connection import router as connection_router
from clouddedup.api.routes.deletion import router as deletion_router
from clouddedup.api.routes.duplicates import router as duplicates_router
from clouddedup.api.routes.files import router as files_router
from clouddedup.api.routes.health import router as health_router
from clouddedup.core.config import get_settings
from clouddedup.core.logging import configure_logging


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(connection_router, prefix="/api/v1")
    app.include_router(files_router, prefix="/api/v1")
    app.include_router(deletion_router, prefix="/api/v1")
    app.include_router(duplicates_router, prefix="/api/v1")
    return app
