"""FastAPI application factory and entry point."""

import logging

import uvicorn
from fastapi import FastAPI

from ticketalert import __version__
from ticketalert.api.exception_handlers import register_exception_handlers
from ticketalert.api.routers import api_router, health
from ticketalert.config import Settings, get_settings
from ticketalert.infrastructure.lifecycle import lifespan
from ticketalert.infrastructure.observability import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Explicit settings (tests). When omitted, the lifespan reads
            them from the environment via get_settings().

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="TicketAlert Norge",
        description="Upcoming concerts in Norway, Spotify-personalized, with resale alerts",
        version=__version__,
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "ticketalert.main:app",
        host="0.0.0.0",  # noqa: S104 - container entrypoint
        port=8000,
        log_level=settings.log_level.lower(),
    )


__all__ = ["app", "create_app", "run"]
