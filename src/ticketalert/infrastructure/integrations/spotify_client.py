"""Spotify Web API client: OAuth authorization code flow and top artists."""

import logging
from typing import Any, cast
from urllib.parse import urlencode

import httpx

from ticketalert.config.settings import SpotifySettings
from ticketalert.domain.exceptions import ConfigurationError, TokenRefreshException
from ticketalert.domain.value_objects.listening_score import TimeRange

logger = logging.getLogger(__name__)

# Read-only: top artists for matching, profile for the "connected as" badge.
SCOPES = ("user-top-read", "user-read-private")
MAX_TOP_ARTISTS = 50


class SpotifyClient:
    """HTTP client for Spotify OAuth and the /me endpoints we need."""

    AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
    TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    API_BASE_URL = "https://api.spotify.com/v1"

    # Hey future me, we DON'T create the httpx client in __init__ (event loop issues when the
    # object is built outside a running loop). _get_client() creates it lazily. Tests pass a
    # client built on httpx.MockTransport instead.
    def __init__(
        self, settings: SpotifySettings, client: httpx.AsyncClient | None = None
    ) -> None:
        self.settings = settings
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout, http2=True)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _client_auth(self) -> httpx.BasicAuth:
        if not self.is_configured:
            raise ConfigurationError(
                "SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET are not configured. "
                "Get credentials at https://developer.spotify.com/dashboard"
            )
        return httpx.BasicAuth(self.settings.client_id, self.settings.client_secret)

    def get_authorization_url(self, state: str) -> str:
        """Build the Spotify consent URL.

        show_dialog=true forces the consent screen so users can switch accounts
        after logging out here.

        Args:
            state: Opaque value echoed back to the callback (CSRF check)

        Returns:
            Authorization URL

        Raises:
            ConfigurationError: If client_id or redirect_uri is not configured
        """
        if not self.settings.client_id.strip():
            raise ConfigurationError("SPOTIFY_CLIENT_ID is not configured")
        if not self.settings.redirect_uri.strip():
            raise ConfigurationError("SPOTIFY_REDIRECT_URI is not configured")

        params = {
            "client_id": self.settings.client_id,
            "response_type": "code",
            "redirect_uri": self.settings.redirect_uri,
            "scope": " ".join(SCOPES),
            "state": state,
            "show_dialog": "true",
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    # Yo, the code is single-use and the redirect_uri MUST match the one used for the consent
    # URL byte for byte or Spotify answers 400 invalid_grant. Form-encoded, HTTP Basic client auth.
    async def exchange_code(self, code: str) -> dict[str, Any]:
        """Exchange an authorization code for tokens.

        Returns:
            Token response with access_token, refresh_token, expires_in

        Raises:
            ConfigurationError: If client credentials are missing
            httpx.HTTPError: If the request fails
        """
        client = await self._get_client()
        response = await client.post(
            self.TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.settings.redirect_uri,
            },
            auth=self._client_auth(),
        )
        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def refresh_token(self, refresh_token: str) -> dict[str, Any]:
        """Get a new access token from a refresh token.

        Returns:
            Token response with access_token, expires_in and (if rotated)
            a new refresh_token

        Raises:
            TokenRefreshException: If the refresh token was rejected (re-auth needed)
            httpx.HTTPError: For other HTTP errors
        """
        client = await self._get_client()
        response = await client.post(
            self.TOKEN_URL,
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
            auth=self._client_auth(),
        )

        if response.status_code == 400:
            error_code = None
            try:
                error_code = response.json().get("error")
            except ValueError:
                pass
            raise TokenRefreshException(
                message="Spotify refresh token is invalid or revoked",
                error_code=error_code or "invalid_request",
                http_status=400,
            )
        if response.status_code in (401, 403):
            raise TokenRefreshException(
                message="Spotify access denied",
                error_code="access_denied",
                http_status=response.status_code,
            )

        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def get_current_user(self, access_token: str) -> dict[str, Any]:
        """GET /me - id, display_name, images."""
        client = await self._get_client()
        response = await client.get(
            f"{self.API_BASE_URL}/me",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def get_top_artists(
        self,
        access_token: str,
        time_range: TimeRange = TimeRange.MEDIUM_TERM,
        limit: int = MAX_TOP_ARTISTS,
    ) -> list[dict[str, Any]]:
        """GET /me/top/artists for one time window.

        Args:
            access_token: OAuth access token
            time_range: Listening window
            limit: Number of artists (clamped to 1-50)

        Returns:
            Artist objects in rank order

        Raises:
            httpx.HTTPError: If the request fails
        """
        client = await self._get_client()
        response = await client.get(
            f"{self.API_BASE_URL}/me/top/artists",
            params={
                "time_range": time_range.value,
                "limit": max(1, min(limit, MAX_TOP_ARTISTS)),
            },
            headers={"Authorization": f"Bearer {access_token}"},
        )
        response.raise_for_status()
        return cast(list[dict[str, Any]], response.json().get("items", []))

    async def __aenter__(self) -> "SpotifyClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


__all__ = ["MAX_TOP_ARTISTS", "SCOPES", "SpotifyClient"]
