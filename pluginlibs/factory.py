"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from .api import health_router
from .bootstrap import ServiceContainer, bootstrap_services
from .logging_config import configure_logging
from .settings import Settings, get_settings
from pluginlibs.modules.librarymanage import library_router


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    services = ServiceContainer(settings)

    app = FastAPI(title=settings.app_name, version=settings.version)
    app.include_router(health_router)
    app.include_router(library_router)
    app.state.container = services

    @app.on_event("startup")
    def _startup() -> None:  # pragma: no cover - invoked by FastAPI
        bootstrap_services(services)

    @app.on_event("shutdown")
    def _shutdown() -> None:  # pragma: no cover - invoked by FastAPI
        services.library_manager.close()

    return app
