"""Resale ticket availability heuristic."""

import logging
from typing import Any

import httpx

from ticketalert.domain.entities import ResaleStatus
from ticketalert.domain.exceptions import ConfigurationError
from ticketalert.infrastructure.integrations.ticketmaster_client import TicketmasterClient

logger = logging.getLogger(__name__)

RESALE_AVAILABLE_INFO = "Videresolgte billetter tilgjengelig!"
NO_RESALE_INFO = "Ingen videresolgte billetter funnet"
_RESALE_MARKER = "resale"


def detect_resale(event: dict[str, Any]) -> bool:
    """True if any price range type or the ticket-limit text mentions resale.

    Hey future me - the Discovery API has no real resale flag. This is a text
    heuristic on two fields and will miss resale listings Ticketmaster doesn't
    describe this way. Known limitation.
    """
    if not isinstance(event, dict):
        return False
    price_ranges = event.get("priceRanges")
    for price_range in price_ranges if isinstance(price_ranges, list) else []:
        if not isinstance(price_range, dict):
            continue
        if _RESALE_MARKER in str(price_range.get("type") or "").lower():
            return True
    ticket_limit = event.get("ticketLimit")
    if not isinstance(ticket_limit, dict):
        return False
    ticket_limit_info = str(ticket_limit.get("info") or "")
    return _RESALE_MARKER in ticket_limit_info.lower()


class ResaleChecker:
    """Checks one event for resale tickets. Always a fresh upstream fetch."""

    def __init__(self, client: TicketmasterClient) -> None:
        self.client = client

    async def check_resale(self, event_id: str) -> ResaleStatus:
        """Check an event for resale availability.

        Never raises: an unconfigured key or any upstream failure reads as
        "no resale found".
        """
        try:
            event = await self.client.get_event(event_id)
        except ConfigurationError:
            logger.debug("[RESALE] Ticketmaster not configured, skipping %s", event_id)
            return ResaleStatus(has_resale=False, info=NO_RESALE_INFO)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("[RESALE] Check failed for event %s: %s", event_id, e)
            return ResaleStatus(has_resale=False, info=NO_RESALE_INFO)

        has_resale = detect_resale(event)
        if has_resale:
            logger.info("[RESALE] Resale tickets detected for event %s", event_id)
        return ResaleStatus(
            has_resale=has_resale,
            info=RESALE_AVAILABLE_INFO if has_resale else NO_RESALE_INFO,
        )


__all__ = ["NO_RESALE_INFO", "RESALE_AVAILABLE_INFO", "ResaleChecker", "detect_resale"]
