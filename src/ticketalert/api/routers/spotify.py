"""Spotify OAuth and top-artist endpoints.

Hey future me - the whole Spotify "session" lives in browser cookies (see api/cookies.py).
Flow:
1. GET /spotify/login     -> random state in a short-lived cookie, 302 to Spotify consent
2. GET /spotify/callback  -> state must match the cookie, code exchanged for tokens,
                             session cookies set, 302 back to "/?spotify_connected=true"
                             (or "/?spotify_error=<reason>" on any failure)
3. GET /spotify/top-artists -> match index for the current cookies (401 if none/expired)
4. POST /spotify/logout   -> cookies cleared

The callback NEVER returns an error body - the browser is mid-redirect, so every
failure becomes a redirect the frontend can show a toast for.
"""

import logging
import secrets
from typing import Annotated

import httpx
from fastapi import APIRouter, Cookie, Depends, Query, Response, status
from fastapi.responses import RedirectResponse

from ticketalert.api.cookies import (
    OAUTH_STATE_COOKIE,
    OAUTH_STATE_MAX_AGE,
    clear_session_cookies,
    set_access_token_cookie,
    set_session_cookies,
)
from ticketalert.api.dependencies import (
    get_app_settings,
    get_personalization_service,
    get_spotify_auth_service,
    get_spotify_session,
)
from ticketalert.api.schemas import (
    ArtistMatchItem,
    LogoutResponse,
    TopArtistItem,
    TopArtistsResponse,
)
from ticketalert.application.services.personalization_service import (
    PersonalizationService,
    SpotifyAuthService,
)
from ticketalert.config import Settings
from ticketalert.domain.entities import SpotifySession
from ticketalert.domain.exceptions import ConfigurationError
from ticketalert.domain.value_objects import TimeRange

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/spotify", tags=["Spotify"])

SPOTIFY_NOT_CONFIGURED_MESSAGE = "Spotify er ikke konfigurert"


def _home_redirect(query: str) -> RedirectResponse:
    return RedirectResponse(url=f"/?{query}", status_code=status.HTTP_302_FOUND)


@router.get("/login")
async def spotify_login(
    auth: Annotated[SpotifyAuthService, Depends(get_spotify_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RedirectResponse:
    """Redirect the browser to Spotify's consent page."""
    if not auth.is_configured:
        raise ConfigurationError(SPOTIFY_NOT_CONFIGURED_MESSAGE)

    state = secrets.token_urlsafe(16)
    response = RedirectResponse(
        url=auth.authorization_url(state), status_code=status.HTTP_302_FOUND
    )
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )
    return response


@router.get("/callback")
async def spotify_callback(
    auth: Annotated[SpotifyAuthService, Depends(get_spotify_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    code: str | None = Query(default=None),
    error: str | None = Query(default=None),
    state: str | None = Query(default=None),
    expected_state: Annotated[str | None, Cookie(alias=OAUTH_STATE_COOKIE)] = None,
) -> RedirectResponse:
    """Finish the OAuth dance and store the session cookies."""
    if error:
        logger.warning("[SPOTIFY] Authorization denied: %s", error)
        return _home_redirect("spotify_error=access_denied")

    if not code:
        return _home_redirect("spotify_error=no_code")

    if not state or not expected_state or not secrets.compare_digest(
        state.encode(), expected_state.encode()
    ):
        logger.warning("[SPOTIFY] OAuth state mismatch on callback")
        response = _home_redirect("spotify_error=state_mismatch")
        response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
        return response

    try:
        connection = await auth.complete_authorization(code)
    except (httpx.HTTPError, ConfigurationError, KeyError, ValueError) as e:
        logger.error("[SPOTIFY] Token exchange failed: %s", e)
        response = _home_redirect("spotify_error=token_exchange")
        response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
        return response

    response = _home_redirect("spotify_connected=true")
    set_session_cookies(response, connection.tokens, connection.user, settings.cookie_secure)
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    return response


@router.post("/logout", response_model=LogoutResponse)
async def spotify_logout(response: Response) -> LogoutResponse:
    """Forget the Spotify session."""
    clear_session_cookies(response)
    return LogoutResponse(success=True)


@router.get("/top-artists", response_model=TopArtistsResponse)
async def spotify_top_artists(
    response: Response,
    personalization: Annotated[
        PersonalizationService, Depends(get_personalization_service)
    ],
    session: Annotated[SpotifySession, Depends(get_spotify_session)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    time_range: TimeRange | None = Query(
        default=None, description="Single window instead of the merged three-window view"
    ),
) -> TopArtistsResponse:
    """Ranked top artists and the normalized-name match map.

    Raises:
        AuthenticationError: No Spotify cookies, or the refresh token was rejected (401)
    """
    result = await personalization.get_match_index(session, time_range=time_range)
    if result.refreshed_tokens is not None:
        set_access_token_cookie(response, result.refreshed_tokens, settings.cookie_secure)

    index = result.index
    return TopArtistsResponse(
        artists=[
            TopArtistItem(name=artist.name, score=artist.score, image=artist.image_url)
            for artist in index.ranked
        ],
        match_map={
            key: ArtistMatchItem(score=match.score, original_name=match.original_name)
            for key, match in index.entries.items()
        },
        total=len(index.ranked),
    )
