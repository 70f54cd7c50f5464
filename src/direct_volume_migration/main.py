"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from direct_volume_migration import __version__
from direct_volume_migration.api import api_router
from direct_volume_migration.api.dependencies import get_migration_task_service, get_settings
from direct_volume_migration.config import Settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Apply the configured level to the package logger."""

    logging.basicConfig(format=_LOG_FORMAT)
    logging.getLogger("direct_volume_migration").setLevel(settings.log_level)


def create_app() -> FastAPI:
    """Build FastAPI application."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        """Build singleton dependencies and run reconcile workers."""

        service = get_migration_task_service()
        await service.startup()
        try:
            yield
        finally:
            await service.shutdown()

    settings = get_settings()
    configure_logging(settings)
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()


def run() -> None:
    """Run local development server."""

    settings = get_settings()
    uvicorn.run(
        "direct_volume_migration.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


__all__ = ["app", "configure_logging", "create_app", "run"]
