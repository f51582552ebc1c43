"""Spotify connection and listening-based personalization."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ticketalert.domain.entities import SpotifySession, SpotifyTokens, SpotifyUser
from ticketalert.domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    TokenRefreshException,
)
from ticketalert.domain.value_objects.listening_score import (
    ArtistMatchIndex,
    TimeRange,
    TopArtist,
    build_match_index,
)
from ticketalert.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED_MESSAGE = "Not authenticated with Spotify"
SESSION_EXPIRED_MESSAGE = "Session expired, please login again"


def _tokens_from_response(data: dict[str, Any]) -> SpotifyTokens:
    return SpotifyTokens(
        access_token=str(data["access_token"]),
        expires_in=int(data.get("expires_in") or 3600),
        refresh_token=data.get("refresh_token"),
    )


def _user_from_profile(profile: dict[str, Any]) -> SpotifyUser:
    images = profile.get("images") or []
    return SpotifyUser(
        id=str(profile.get("id", "")),
        name=str(profile.get("display_name") or profile.get("id") or ""),
        image=images[0].get("url") if images else None,
    )


@dataclass(frozen=True)
class SpotifyConnection:
    """Result of a completed OAuth callback."""

    tokens: SpotifyTokens
    user: SpotifyUser | None


@dataclass(frozen=True)
class PersonalizationResult:
    index: ArtistMatchIndex
    # Set when the access token had to be refreshed; the API layer re-issues the cookie
    refreshed_tokens: SpotifyTokens | None = None


class SpotifyAuthService:
    """OAuth authorization code flow."""

    def __init__(self, client: SpotifyClient) -> None:
        self.client = client

    @property
    def is_configured(self) -> bool:
        return self.client.is_configured

    def authorization_url(self, state: str) -> str:
        return self.client.get_authorization_url(state)

    async def complete_authorization(self, code: str) -> SpotifyConnection:
        """Exchange the callback code and fetch the profile.

        A failed profile fetch is not fatal - the user is still connected,
        the UI just can't show a name.

        Raises:
            httpx.HTTPError: Token exchange failed
            ConfigurationError: Client credentials missing
        """
        tokens = _tokens_from_response(await self.client.exchange_code(code))

        user = None
        try:
            user = _user_from_profile(await self.client.get_current_user(tokens.access_token))
        except httpx.HTTPError as e:
            logger.warning("[SPOTIFY] Profile fetch failed after login: %s", e)

        logger.info("[SPOTIFY] Account connected: %s", user.id if user else "unknown")
        return SpotifyConnection(tokens=tokens, user=user)


class PersonalizationService:
    """Build an ArtistMatchIndex from a user's Spotify top artists."""

    def __init__(self, client: SpotifyClient) -> None:
        self.client = client

    async def _ensure_access_token(
        self, session: SpotifySession
    ) -> tuple[str, SpotifyTokens | None]:
        if session.access_token:
            return session.access_token, None
        if not session.refresh_token:
            raise AuthenticationError(NOT_AUTHENTICATED_MESSAGE)

        try:
            tokens = _tokens_from_response(
                await self.client.refresh_token(session.refresh_token)
            )
        except (TokenRefreshException, ConfigurationError, httpx.HTTPError, KeyError) as e:
            logger.warning("[SPOTIFY] Token refresh failed: %s", e)
            raise AuthenticationError(SESSION_EXPIRED_MESSAGE) from e
        logger.debug("[SPOTIFY] Access token refreshed")
        return tokens.access_token, tokens

    async def _fetch_window(self, access_token: str, time_range: TimeRange) -> list[TopArtist]:
        try:
            items = await self.client.get_top_artists(access_token, time_range)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("[SPOTIFY] Top artists (%s) unavailable: %s", time_range.value, e)
            return []
        return [TopArtist.from_spotify(item) for item in items]

    async def get_match_index(
        self, session: SpotifySession, time_range: TimeRange | None = None
    ) -> PersonalizationResult:
        """Fetch top artists and build the match index.

        Without ``time_range`` all three windows are fetched concurrently and
        merged (a failed window counts as empty). With ``time_range`` only that
        window is fetched and scored by rank.

        Raises:
            AuthenticationError: No tokens, or the refresh token was rejected
        """
        access_token, refreshed = await self._ensure_access_token(session)

        if time_range is not None:
            artists = await self._fetch_window(access_token, time_range)
            return PersonalizationResult(ArtistMatchIndex.from_ranking(artists), refreshed)

        short_term, medium_term, long_term = await asyncio.gather(
            self._fetch_window(access_token, TimeRange.SHORT_TERM),
            self._fetch_window(access_token, TimeRange.MEDIUM_TERM),
            self._fetch_window(access_token, TimeRange.LONG_TERM),
        )
        index = build_match_index(short_term, medium_term, long_term)
        logger.info(
            "[SPOTIFY] Match index built: %d artists (%d/%d/%d per window)",
            len(index),
            len(short_term),
            len(medium_term),
            len(long_term),
        )
        return PersonalizationResult(index, refreshed)


__all__ = [
    "PersonalizationResult",
    "PersonalizationService",
    "SpotifyAuthService",
    "SpotifyConnection",
]
