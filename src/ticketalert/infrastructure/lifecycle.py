"""Application lifecycle management for startup and shutdown tasks.

Everything the routers need is built here ONCE and parked on ``app.state``:

- settings, database (only when DATABASE_URL is set)
- subscription_store   database-backed, or the unconfigured demo-mode store
- ticketmaster_client, spotify_client (shared httpx clients)
- catalog_service, resale_checker, tracking_service
- personalization_service, spotify_auth_service
- email_sender         Resend, or the unconfigured no-op sender
- domestic_artists     bundled list or DOMESTIC_ARTISTS_FILE
- resale_sweep         the sweep the cron endpoint triggers
- sweep_worker         optional in-process loop (SWEEP_INTERVAL_SECONDS > 0)
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI

from ticketalert.application.services.artist_grouping import load_domestic_artists
from ticketalert.application.services.concert_catalog_service import ConcertCatalogService
from ticketalert.application.services.personalization_service import (
    PersonalizationService,
    SpotifyAuthService,
)
from ticketalert.application.services.resale_checker import ResaleChecker
from ticketalert.application.services.tracking_service import TrackingService
from ticketalert.application.workers.resale_sweep_worker import (
    ResaleSweep,
    ResaleSweepWorker,
)
from ticketalert.config import Settings, get_settings
from ticketalert.domain.exceptions import ConfigurationError
from ticketalert.infrastructure.integrations import SpotifyClient, TicketmasterClient
from ticketalert.infrastructure.notifications import create_email_sender
from ticketalert.infrastructure.observability import configure_logging
from ticketalert.infrastructure.persistence import Database, create_subscription_store

logger = logging.getLogger(__name__)

WORKER_STOP_TIMEOUT_SECONDS = 5.0


def _ensure_sqlite_directory(settings: Settings) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    db_path = settings.get_sqlite_db_path()
    if db_path is None or str(db_path.parent) in ("", "."):
        return
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{db_path.parent}': {exc}. "
            "Update DATABASE_URL or adjust directory permissions."
        ) from exc


def _log_integration_status(settings: Settings) -> None:
    for name, configured in (
        ("Ticketmaster", settings.ticketmaster.is_configured),
        ("Spotify", settings.spotify.is_configured),
        ("Email", settings.email.is_configured),
        ("Database", settings.database.is_configured),
    ):
        if configured:
            logger.info("%s: configured", name)
        else:
            logger.warning("%s: not configured, running without it", name)


# Listen future me, everything before `yield` runs at STARTUP, everything after at SHUTDOWN.
# The try/finally makes sure clients and the engine get closed even if startup blew up halfway.
# Settings come from app.state.settings when create_app() got explicit settings (tests), so a
# test app never reads the developer's .env.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)
    _log_integration_status(settings)

    database: Database | None = None
    ticketmaster: TicketmasterClient | None = None
    spotify: SpotifyClient | None = None
    email_sender = None
    sweep_worker: ResaleSweepWorker | None = None
    sweep_task: asyncio.Task[None] | None = None
    try:
        if settings.database.is_configured:
            _ensure_sqlite_directory(settings)
            database = Database(settings.database)
            if settings.database.create_tables:
                await database.create_tables()
            logger.info("Database initialized (%s)", database.dialect)
        app.state.database = database

        store = create_subscription_store(settings.database, database)
        app.state.subscription_store = store

        ticketmaster = TicketmasterClient(settings.ticketmaster)
        spotify = SpotifyClient(settings.spotify)
        app.state.ticketmaster_client = ticketmaster
        app.state.spotify_client = spotify

        catalog = ConcertCatalogService(ticketmaster)
        resale_checker = ResaleChecker(ticketmaster)
        app.state.catalog_service = catalog
        app.state.resale_checker = resale_checker
        app.state.tracking_service = TrackingService(store)
        app.state.personalization_service = PersonalizationService(spotify)
        app.state.spotify_auth_service = SpotifyAuthService(spotify)

        email_sender = create_email_sender(settings.email)
        app.state.email_sender = email_sender

        app.state.domestic_artists = load_domestic_artists(settings.domestic_artists_file)
        logger.info("Loaded %d domestic artists", len(app.state.domestic_artists))

        sweep = ResaleSweep(
            store=store,
            resale_checker=resale_checker,
            catalog=catalog,
            email_sender=email_sender,
            delay_seconds=settings.sweep.delay_seconds,
        )
        app.state.resale_sweep = sweep

        if settings.sweep.interval_seconds > 0:
            sweep_worker = ResaleSweepWorker(sweep, settings.sweep.interval_seconds)
            sweep_task = asyncio.create_task(sweep_worker.start())
            app.state.sweep_worker = sweep_worker
        else:
            app.state.sweep_worker = None
            logger.info("In-process sweep disabled, waiting for external trigger")

        yield
    except Exception as e:
        logger.exception("Error during application startup: %s", e)
        raise
    finally:
        logger.info("Shutting down application")

        if sweep_worker is not None:
            sweep_worker.stop()
        if sweep_task is not None:
            sweep_task.cancel()
            with suppress(asyncio.CancelledError, TimeoutError):
                await asyncio.wait_for(sweep_task, timeout=WORKER_STOP_TIMEOUT_SECONDS)

        for name, resource in (
            ("Ticketmaster client", ticketmaster),
            ("Spotify client", spotify),
            ("Email sender", email_sender),
            ("Database", database),
        ):
            if resource is None:
                continue
            try:
                await resource.close()
                logger.debug("%s closed", name)
            except Exception as e:
                logger.exception("Error closing %s: %s", name, e)


__all__ = ["lifespan"]
