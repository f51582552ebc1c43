"""Fixtures for HTTP-level tests.

Hey future me - the app boots through its real lifespan (temp SQLite database, real
stores and services). Only the outbound HTTP is faked: every upstream client is
rebuilt on one httpx.MockTransport served by FakeUpstream and swapped in through
app.dependency_overrides.
"""

import json
from collections.abc import Iterator
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ticketalert.api.dependencies import (
    get_catalog_service,
    get_email_sender,
    get_personalization_service,
    get_resale_checker,
    get_resale_sweep,
    get_spotify_auth_service,
)
from ticketalert.application.services.concert_catalog_service import ConcertCatalogService
from ticketalert.application.services.personalization_service import (
    PersonalizationService,
    SpotifyAuthService,
)
from ticketalert.application.services.resale_checker import ResaleChecker
from ticketalert.application.workers.resale_sweep_worker import ResaleSweep
from ticketalert.config import Settings
from ticketalert.infrastructure.integrations import SpotifyClient, TicketmasterClient
from ticketalert.infrastructure.notifications import ResendEmailProvider
from ticketalert.main import create_app


class FakeUpstream:
    """Ticketmaster, Spotify and Resend behind one request handler."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []
        self.event_details: dict[str, dict[str, Any]] = {}
        self.top_artists: dict[str, list[dict[str, Any]]] = {}
        self.refresh_rejected = False
        self.email_status = 200
        self.sent_emails: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "app.ticketmaster.com":
            return self._ticketmaster(request)
        if host == "accounts.spotify.com":
            return self._spotify_token(request)
        if host == "api.spotify.com":
            return self._spotify_api(request)
        if host == "api.resend.com":
            return self._resend(request)
        return httpx.Response(404)

    def _ticketmaster(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/events.json"):
            page = int(request.url.params.get("page", "0"))
            size = int(request.url.params.get("size", "20"))
            chunk = self.events[page * size : (page + 1) * size]
            if not chunk:
                return httpx.Response(200, json={"page": {"totalElements": 0}})
            total_pages = -(-len(self.events) // size)
            return httpx.Response(
                200,
                json={
                    "_embedded": {"events": chunk},
                    "page": {
                        "size": size,
                        "totalElements": len(self.events),
                        "totalPages": total_pages,
                        "number": page,
                    },
                },
            )
        event_id = path.split("/events/", 1)[1].removesuffix(".json")
        event = self.event_details.get(event_id)
        if event is None:
            return httpx.Response(404, json={"fault": {"faultstring": "not found"}})
        return httpx.Response(200, json=event)

    def _spotify_token(self, request: httpx.Request) -> httpx.Response:
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        if form.get("grant_type") == "authorization_code":
            if form.get("code") == "bad-code":
                return httpx.Response(400, json={"error": "invalid_grant"})
            return httpx.Response(
                200,
                json={
                    "access_token": "access-1",
                    "refresh_token": "refresh-1",
                    "expires_in": 3600,
                    "token_type": "Bearer",
                },
            )
        if self.refresh_rejected:
            return httpx.Response(400, json={"error": "invalid_grant"})
        return httpx.Response(
            200, json={"access_token": "access-2", "expires_in": 3600, "token_type": "Bearer"}
        )

    def _spotify_api(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/me":
            return httpx.Response(
                200,
                json={
                    "id": "ola",
                    "display_name": "Ola Nordmann",
                    "images": [{"url": "https://img.example/ola.jpg"}],
                },
            )
        time_range = request.url.params.get("time_range", "")
        return httpx.Response(200, json={"items": self.top_artists.get(time_range, [])})

    def _resend(self, request: httpx.Request) -> httpx.Response:
        if self.email_status >= 400:
            return httpx.Response(self.email_status, json={"message": "Domain not verified"})
        self.sent_emails.append(json.loads(request.content))
        return httpx.Response(200, json={"id": f"email-{len(self.sent_emails)}"})



@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI, settings: Settings, upstream: FakeUpstream) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        http = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handle))
        ticketmaster = TicketmasterClient(settings.ticketmaster, client=http)
        spotify = SpotifyClient(settings.spotify, client=http)

        catalog = ConcertCatalogService(ticketmaster)
        checker = ResaleChecker(ticketmaster)
        sender = ResendEmailProvider(settings.email, client=http)
        sweep = ResaleSweep(
            store=app.state.subscription_store,
            resale_checker=checker,
            catalog=catalog,
            email_sender=sender,
            delay_seconds=0,
        )

        app.dependency_overrides[get_catalog_service] = lambda: catalog
        app.dependency_overrides[get_resale_checker] = lambda: checker
        app.dependency_overrides[get_email_sender] = lambda: sender
        app.dependency_overrides[get_resale_sweep] = lambda: sweep
        app.dependency_overrides[get_personalization_service] = lambda: (
            PersonalizationService(spotify)
        )
        app.dependency_overrides[get_spotify_auth_service] = lambda: SpotifyAuthService(spotify)

        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def cron_headers(settings: Settings) -> dict[str, str]:
    return {"Authorization": f"Bearer {settings.cron_secret}"}
