"""Concert catalog: Ticketmaster search results mapped to Concert entities.

Hey future me - this service is the "never fails" face of Ticketmaster. The raw
client raises on every problem; here we log and degrade:

- list_events()         -> EventPage.empty() on missing key / HTTP error / junk JSON
- get_event_details()   -> None on any failure
- fetch_all_pages()     -> page 0, then up to max_pages-1 more pages concurrently,
                           a failed page simply contributes nothing

The browse page used to do the multi-page fetch in the browser; it lives here now
so the /api/concerts/browse endpoint can group and personalize server-side.
"""

import asyncio
import datetime as dt
import logging
from typing import Any

import httpx

from ticketalert.domain.entities import (
    PLACEHOLDER_IMAGE,
    UNKNOWN_CITY,
    UNKNOWN_VENUE,
    Concert,
    EventCategory,
    EventPage,
    PriceRange,
)
from ticketalert.domain.exceptions import ConfigurationError
from ticketalert.infrastructure.integrations.ticketmaster_client import TicketmasterClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 200
# Ticketmaster refuses size * page beyond 1000 results; 5 pages of 200 is the ceiling.
MAX_PREFETCH_PAGES = 5
MIN_IMAGE_WIDTH = 500
PREFERRED_IMAGE_RATIO = "16_9"


def _pick_image(images: list[dict[str, Any]]) -> str:
    for image in images:
        wide_enough = (image.get("width") or 0) >= MIN_IMAGE_WIDTH
        if image.get("ratio") == PREFERRED_IMAGE_RATIO and wide_enough:
            return str(image.get("url") or PLACEHOLDER_IMAGE)
    if images and images[0].get("url"):
        return str(images[0]["url"])
    return PLACEHOLDER_IMAGE


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _pick_price_range(price_ranges: list[dict[str, Any]]) -> PriceRange | None:
    """First entry, kept even when partial. A non-numeric min/max raises ValueError."""
    if not price_ranges:
        return None
    first = price_ranges[0]
    return PriceRange(
        min=_optional_float(first.get("min")),
        max=_optional_float(first.get("max")),
        currency=str(first["currency"]) if first.get("currency") else None,
    )


def _parse_time(value: str | None) -> dt.time | None:
    if not value:
        return None
    try:
        return dt.time.fromisoformat(value)
    except ValueError:
        return None


def _to_concert(event: dict[str, Any]) -> Concert | None:
    start = (event.get("dates") or {}).get("start") or {}
    try:
        date = dt.date.fromisoformat(str(start.get("localDate", "")))
    except ValueError:
        logger.debug("[CATALOG] Skipping event %s without usable localDate", event.get("id"))
        return None
    if not event.get("id"):
        return None

    venues = (event.get("_embedded") or {}).get("venues") or []
    venue = venues[0] if venues else {}

    return Concert(
        id=str(event["id"]),
        name=str(event.get("name") or ""),
        date=date,
        time=_parse_time(start.get("localTime")),
        venue=venue.get("name") or UNKNOWN_VENUE,
        city=(venue.get("city") or {}).get("name") or UNKNOWN_CITY,
        image_url=_pick_image(event.get("images") or []),
        url=str(event.get("url") or ""),
        price_range=_pick_price_range(event.get("priceRanges") or []),
    )


# Hey future me, one malformed record (price "ukjent", venue null, event not even a dict) must
# only cost that record. Everything downstream, the resale sweep included, relies on the
# mapping never raising.
def map_event(event: dict[str, Any]) -> Concert | None:
    """Map a raw Discovery API event to a Concert.

    Returns None when the event has no id, no parseable start date, or fields
    that can't be converted - those are dropped from listings.
    """
    try:
        return _to_concert(event)
    except (ValueError, TypeError, AttributeError, KeyError) as e:
        event_id = event.get("id") if isinstance(event, dict) else None
        logger.warning("[CATALOG] Skipping malformed event %s: %s", event_id, e)
        return None


def map_events(events: list[dict[str, Any]]) -> list[Concert]:
    concerts = []
    for event in events:
        concert = map_event(event)
        if concert is not None:
            concerts.append(concert)
    return concerts


class ConcertCatalogService:
    """Upcoming events in Norway, with failures turned into empty results."""

    def __init__(self, client: TicketmasterClient) -> None:
        self.client = client

    @property
    def is_configured(self) -> bool:
        return self.client.is_configured

    async def list_events(
        self,
        keyword: str | None = None,
        category: EventCategory = EventCategory.ALL,
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> EventPage:
        """One page of upcoming events, soonest first.

        Args:
            keyword: Optional free-text filter
            category: UI category, 'all' means no classification filter
            page: 0-based page index
            page_size: Events per page

        Returns:
            EventPage; empty with zero totals on any upstream problem
        """
        if not self.client.is_configured:
            logger.error("[CATALOG] TICKETMASTER_API_KEY missing, returning no events")
            return EventPage.empty(page)

        try:
            data = await self.client.search_events(
                keyword=keyword or None,
                classification_name=category.classification_name,
                page=page,
                size=page_size,
            )
        except (httpx.HTTPError, ValueError, ConfigurationError) as e:
            logger.error("[CATALOG] Event search failed (page %s): %s", page, e)
            return EventPage.empty(page)

        try:
            raw_events = (data.get("_embedded") or {}).get("events") or []
            page_info = data.get("page") or {}
        except AttributeError:
            logger.error("[CATALOG] Unexpected search response shape (page %s)", page)
            return EventPage.empty(page)
        if not raw_events or not isinstance(raw_events, list):
            return EventPage.empty(page)
        if not isinstance(page_info, dict):
            page_info = {}

        concerts = map_events(raw_events)
        return EventPage(
            concerts=concerts,
            total_pages=page_info.get("totalPages") or 1,
            total_elements=page_info.get("totalElements") or len(raw_events),
            current_page=page_info.get("number") or page,
        )

    async def get_event_details(self, event_id: str) -> Concert | None:
        """Fresh details for one event, or None if unavailable."""
        if not event_id or not self.client.is_configured:
            return None
        try:
            event = await self.client.get_event(event_id)
        except (httpx.HTTPError, ValueError, ConfigurationError) as e:
            logger.warning("[CATALOG] Event details unavailable for %s: %s", event_id, e)
            return None
        return map_event(event)

    # Listen up, page 0 tells us how many pages exist, the rest go out in parallel. Bounded by
    # max_pages (default 5 = 1000 events) so one browse request is at most 5 upstream calls.
    # list_events() already never raises, but gather(return_exceptions=True) keeps a surprise
    # bug in one page from killing the whole listing.
    async def fetch_all_pages(
        self,
        keyword: str | None = None,
        category: EventCategory = EventCategory.ALL,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = MAX_PREFETCH_PAGES,
    ) -> EventPage:
        """Fetch page 0 plus the following pages up to max_pages, concatenated."""
        first = await self.list_events(keyword, category, page=0, page_size=page_size)
        if not first.concerts:
            return first

        last_page = min(first.total_pages, max(max_pages, 1))
        concerts = list(first.concerts)
        if last_page > 1:
            results = await asyncio.gather(
                *(
                    self.list_events(keyword, category, page=page, page_size=page_size)
                    for page in range(1, last_page)
                ),
                return_exceptions=True,
            )
            for page_number, result in enumerate(results, start=1):
                if isinstance(result, BaseException):
                    logger.error("[CATALOG] Page %s failed: %s", page_number, result)
                    continue
                concerts.extend(result.concerts)

        return EventPage(
            concerts=concerts,
            total_pages=first.total_pages,
            total_elements=first.total_elements,
            current_page=max(last_page - 1, 0),
        )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PREFETCH_PAGES",
    "ConcertCatalogService",
    "map_event",
    "map_events",
]
