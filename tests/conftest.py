"""Shared test fixtures."""

import datetime as dt
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from ticketalert.config import (
    DatabaseSettings,
    EmailSettings,
    Settings,
    SpotifySettings,
    SweepSettings,
    TicketmasterSettings,
)
from ticketalert.domain.entities import Concert
from ticketalert.infrastructure.persistence import Database


def make_concert(
    name: str = "Aurora",
    date: dt.date = dt.date(2026, 3, 15),
    city: str = "Oslo",
    venue: str = "Oslo Spektrum",
    event_id: str | None = None,
    time: dt.time | None = None,
) -> Concert:
    return Concert(
        id=event_id or f"{name}-{date.isoformat()}-{city}",
        name=name,
        date=date,
        venue=venue,
        city=city,
        image_url="https://img.example/aurora.jpg",
        url="https://www.ticketmaster.no/event/123",
        time=time,
    )


def make_tm_event(
    event_id: str = "Z698xZC2Z17aF7P",
    name: str = "Aurora",
    local_date: str | None = "2026-03-15",
    **extra: Any,
) -> dict[str, Any]:
    """A raw Discovery API event with sensible defaults."""
    event: dict[str, Any] = {
        "id": event_id,
        "name": name,
        "url": f"https://www.ticketmaster.no/event/{event_id}",
        "dates": {"start": {"localDate": local_date, "localTime": "19:30:00"}},
        "images": [{"url": "https://img.example/small.jpg", "ratio": "4_3", "width": 305}],
        "_embedded": {"venues": [{"name": "Oslo Spektrum", "city": {"name": "Oslo"}}]},
    }
    if local_date is None:
        event["dates"] = {"start": {}}
    event.update(extra)
    return event


@pytest.fixture
def mock_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for an httpx.AsyncClient served by a handler function."""

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'ticketalert-test.db'}"


@pytest.fixture
async def database(sqlite_url: str) -> AsyncGenerator[Database, None]:
    """File-backed SQLite database with the schema created."""
    db = Database(DatabaseSettings(url=sqlite_url))
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def settings(sqlite_url: str) -> Settings:
    """Fully configured settings that never touch a real upstream."""
    return Settings(
        log_level="WARNING",
        cron_secret="test-cron-secret",
        database=DatabaseSettings(url=sqlite_url),
        ticketmaster=TicketmasterSettings(api_key="tm-test-key"),
        spotify=SpotifySettings(client_id="spotify-id", client_secret="spotify-secret"),
        email=EmailSettings(RESEND_API_KEY="re_test_key"),
        sweep=SweepSettings(delay_seconds=0, interval_seconds=0),
    )


@pytest.fixture
def concert_factory() -> Callable[..., Concert]:
    return make_concert


@pytest.fixture
def tm_event_factory() -> Callable[..., dict[str, Any]]:
    return make_tm_event
