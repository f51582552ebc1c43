"""Ticketmaster Discovery API client."""

import logging
from typing import Any, cast
from urllib.parse import quote

import httpx

from ticketalert.config.settings import TicketmasterSettings
from ticketalert.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

COUNTRY_CODE = "NO"
DEFAULT_SORT = "date,asc"


class TicketmasterClient:
    """Thin HTTP client for the Discovery API v2.

    Returns raw JSON dicts; mapping to Concert lives in the catalog service.
    Every call is a single attempt. Failures surface as httpx.HTTPError and it's
    the caller's job to degrade (empty list, None, "no resale").
    """

    # Hey future me, pass an httpx.AsyncClient in tests (httpx.MockTransport) - otherwise we
    # lazily create one on first use, same as the Spotify client.
    def __init__(
        self,
        settings: TicketmasterSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.timeout,
                http2=True,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _require_key(self) -> str:
        if not self.is_configured:
            raise ConfigurationError("TICKETMASTER_API_KEY is not configured")
        return self.settings.api_key

    async def search_events(
        self,
        keyword: str | None = None,
        classification_name: str | None = None,
        page: int = 0,
        size: int = 200,
    ) -> dict[str, Any]:
        """Search upcoming events in Norway, soonest first.

        Args:
            keyword: Free-text filter (artist, event name)
            classification_name: Ticketmaster segment/genre name, e.g. "Music"
            page: 0-based page number
            size: Page size (Ticketmaster caps size * page at 1000)

        Returns:
            Raw search response with optional "_embedded.events" and "page"

        Raises:
            ConfigurationError: If no API key is configured
            httpx.HTTPError: On transport errors or non-2xx status
        """
        params: dict[str, str | int] = {
            "apikey": self._require_key(),
            "countryCode": COUNTRY_CODE,
            "size": size,
            "page": page,
            "sort": DEFAULT_SORT,
        }
        if classification_name:
            params["classificationName"] = classification_name
        if keyword:
            params["keyword"] = keyword

        logger.debug(
            "[TICKETMASTER] Searching events page=%s size=%s classification=%s keyword=%s",
            page,
            size,
            classification_name,
            keyword,
        )
        client = await self._get_client()
        response = await client.get(f"{self.settings.base_url}/events.json", params=params)
        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def get_event(self, event_id: str) -> dict[str, Any]:
        """Fetch one event, uncached.

        Raises:
            ConfigurationError: If no API key is configured
            httpx.HTTPError: On transport errors or non-2xx status
        """
        params = {"apikey": self._require_key()}
        client = await self._get_client()
        response = await client.get(
            f"{self.settings.base_url}/events/{quote(event_id, safe='')}.json",
            params=params,
            headers={"Cache-Control": "no-cache"},
        )
        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def __aenter__(self) -> "TicketmasterClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


__all__ = ["TicketmasterClient"]
