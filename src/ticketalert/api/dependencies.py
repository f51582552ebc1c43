"""Dependency injection for API endpoints."""

import logging
import secrets
from typing import Annotated, Any

from fastapi import Cookie, Depends, Header, HTTPException, Request

from ticketalert.api.cookies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    USER_COOKIE,
    parse_user_cookie,
)
from ticketalert.application.services.concert_catalog_service import ConcertCatalogService
from ticketalert.application.services.personalization_service import (
    PersonalizationService,
    SpotifyAuthService,
)
from ticketalert.application.services.resale_checker import ResaleChecker
from ticketalert.application.services.tracking_service import TrackingService
from ticketalert.application.workers.resale_sweep_worker import ResaleSweep
from ticketalert.config import Settings, get_settings
from ticketalert.domain.entities import SpotifySession
from ticketalert.domain.exceptions import AuthenticationError
from ticketalert.domain.ports import IEmailSender, ISubscriptionStore

logger = logging.getLogger(__name__)


# Hey future me, every service is built ONCE in lifecycle.py and parked on app.state. These
# getters just hand it out. Missing attribute = startup didn't run (or failed) -> 503 instead
# of an AttributeError 500. Tests swap any of them via app.dependency_overrides.
def _from_state(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{name} not initialized")
    return service


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def get_catalog_service(request: Request) -> ConcertCatalogService:
    return _from_state(request, "catalog_service")


def get_resale_checker(request: Request) -> ResaleChecker:
    return _from_state(request, "resale_checker")


def get_subscription_store(request: Request) -> ISubscriptionStore:
    return _from_state(request, "subscription_store")


def get_tracking_service(request: Request) -> TrackingService:
    return _from_state(request, "tracking_service")


def get_email_sender(request: Request) -> IEmailSender:
    return _from_state(request, "email_sender")


def get_resale_sweep(request: Request) -> ResaleSweep:
    return _from_state(request, "resale_sweep")


def get_personalization_service(request: Request) -> PersonalizationService:
    return _from_state(request, "personalization_service")


def get_spotify_auth_service(request: Request) -> SpotifyAuthService:
    return _from_state(request, "spotify_auth_service")


def get_domestic_artists(request: Request) -> tuple[str, ...]:
    return tuple(getattr(request.app.state, "domestic_artists", ()))


def get_spotify_session(
    access_token: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_COOKIE)] = None,
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
    user: Annotated[str | None, Cookie(alias=USER_COOKIE)] = None,
) -> SpotifySession:
    """Build the Spotify session value from the request cookies."""
    return SpotifySession(
        access_token=access_token or None,
        refresh_token=refresh_token or None,
        user=parse_user_cookie(user),
    )


def parse_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


# Listen up, CRON_SECRET unset = the sweep trigger is OPEN. That's how the product always
# worked (zero-config demo deploys). We warn on every call so nobody runs prod like this by accident.
def verify_cron_secret(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Guard the sweep trigger with 'Authorization: Bearer <CRON_SECRET>'.

    Raises:
        AuthenticationError: Secret configured and the header doesn't match
    """
    if not settings.cron_secret:
        logger.warning("CRON_SECRET not set - /api/check-and-notify is unauthenticated")
        return
    token = parse_bearer_token(authorization)
    if token is None or not secrets.compare_digest(
        token.encode(), settings.cron_secret.encode()
    ):
        raise AuthenticationError("Unauthorized")


__all__ = [
    "get_app_settings",
    "get_catalog_service",
    "get_domestic_artists",
    "get_email_sender",
    "get_personalization_service",
    "get_resale_checker",
    "get_resale_sweep",
    "get_spotify_auth_service",
    "get_spotify_session",
    "get_subscription_store",
    "get_tracking_service",
    "parse_bearer_token",
    "verify_cron_secret",
]
