"""Tests for the Ticketmaster Discovery API client."""

import httpx
import pytest

from ticketalert.config import TicketmasterSettings
from ticketalert.domain.exceptions import ConfigurationError
from ticketalert.infrastructure.integrations import TicketmasterClient


async def test_requires_api_key() -> None:
    client = TicketmasterClient(TicketmasterSettings(api_key=""))
    assert client.is_configured is False
    with pytest.raises(ConfigurationError):
        await client.search_events()
    with pytest.raises(ConfigurationError):
        await client.get_event("abc")


async def test_event_id_is_path_escaped() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "a/b"})

    async with TicketmasterClient(
        TicketmasterSettings(api_key="k"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    ) as client:
        await client.get_event("a/b")

    assert seen[0].url.raw_path.startswith(b"/discovery/v2/events/a%2Fb.json")


async def test_http_errors_propagate() -> None:
    client = TicketmasterClient(
        TicketmasterSettings(api_key="k"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(429))),
    )
    with pytest.raises(httpx.HTTPStatusError):
        await client.search_events(keyword="kygo")
