"""API router initialization."""

# Hey future me, this is the API router aggregator. It gets mounted under /api in main.py, so
# concerts.router (prefix="/concerts") ends up at /api/concerts. Routers without a prefix here
# define their full path themselves (/check-resale, /track, ...). health.router is NOT in here:
# /health lives at the root, main.py includes it separately.

from fastapi import APIRouter

from ticketalert.api.routers import (
    concerts,
    diagnostics,
    health,
    resale,
    spotify,
    sweep,
    tracking,
)

api_router = APIRouter()

api_router.include_router(concerts.router)
api_router.include_router(resale.router)
api_router.include_router(tracking.router)
api_router.include_router(sweep.router)
api_router.include_router(spotify.router)
api_router.include_router(diagnostics.router)

__all__ = [
    "api_router",
    "concerts",
    "diagnostics",
    "health",
    "resale",
    "spotify",
    "sweep",
    "tracking",
]
