"""Health check endpoint for Docker/uptime probes."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from ticketalert import __version__

router = APIRouter(tags=["Health"])


class HealthStatus(BaseModel):
    """Liveness plus which integrations are configured."""

    status: str = Field(description="healthy or degraded")
    timestamp: str = Field(description="ISO timestamp of health check")
    version: str = Field(default=__version__, description="Application version")
    checks: dict[str, Any] = Field(
        default_factory=dict, description="Individual component checks"
    )


# Hey future me, "degraded" only means the database is configured but unreachable. Missing
# API keys are NOT unhealthy - the app intentionally runs in demo mode without them.
@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request) -> HealthStatus:
    """Always 200 while the process is up; details live in ``checks``."""
    state = request.app.state
    settings = getattr(state, "settings", None)
    database = getattr(state, "database", None)

    database_ok: bool | None = None
    if database is not None:
        database_ok = await database.ping()

    checks: dict[str, Any] = {
        "database": {
            "configured": database is not None,
            "connected": database_ok,
        },
        "ticketmaster": bool(settings and settings.ticketmaster.is_configured),
        "spotify": bool(settings and settings.spotify.is_configured),
        "email": bool(settings and settings.email.is_configured),
    }
    worker = getattr(state, "sweep_worker", None)
    if worker is not None:
        checks["sweep_worker"] = worker.get_stats()

    return HealthStatus(
        status="degraded" if database_ok is False else "healthy",
        timestamp=datetime.now(UTC).isoformat(),
        checks=checks,
    )
