"""Registering resale alert subscriptions."""

import logging
import re
from dataclasses import dataclass

from ticketalert.domain.entities import UNKNOWN_EVENT_NAME, TrackedSubscription
from ticketalert.domain.exceptions import ValidationException
from ticketalert.domain.ports import ISubscriptionStore

logger = logging.getLogger(__name__)

# Deliberately loose: something@something.tld, no whitespace. Real validation is the inbox.
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MISSING_FIELDS_MESSAGE = "eventId og email er påkrevd"
INVALID_EVENT_ID_MESSAGE = "Ugyldig eventId"
INVALID_EMAIL_MESSAGE = "Ugyldig e-postformat"
TRACKING_CONFIRMED_MESSAGE = "Du vil nå motta varsel når billetter blir tilgjengelige"

# Column widths of tracked_events. Longer input would fail at the database instead of here.
MAX_EVENT_ID_LENGTH = 64
MAX_EVENT_NAME_LENGTH = 512
MAX_EMAIL_LENGTH = 320


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


@dataclass(frozen=True)
class TrackingResult:
    message: str
    subscription: TrackedSubscription | None = None

    @property
    def stored(self) -> bool:
        return self.subscription is not None


class TrackingService:
    """Validate and store a tracking request."""

    def __init__(self, store: ISubscriptionStore) -> None:
        self.store = store

    async def track(
        self, event_id: str | None, email: str | None, event_name: str | None = None
    ) -> TrackingResult:
        """Register a pending subscription for (event_id, email).

        Raises:
            ValidationException: Missing event id/email, over-long event id, or
                malformed email
            DuplicateSubscriptionError: Already tracking this event with this email
        """
        event_id = (event_id or "").strip()
        email = (email or "").strip()
        if not event_id or not email:
            raise ValidationException(MISSING_FIELDS_MESSAGE)
        if len(event_id) > MAX_EVENT_ID_LENGTH:
            raise ValidationException(INVALID_EVENT_ID_MESSAGE)
        if len(email) > MAX_EMAIL_LENGTH or not is_valid_email(email):
            raise ValidationException(INVALID_EMAIL_MESSAGE)

        # Display only. Cut to the column width, never rejected.
        event_name = (event_name or "").strip()[:MAX_EVENT_NAME_LENGTH].rstrip()
        subscription = await self.store.create(
            event_id=event_id,
            event_name=event_name or UNKNOWN_EVENT_NAME,
            email=email,
        )
        return TrackingResult(message=TRACKING_CONFIRMED_MESSAGE, subscription=subscription)


__all__ = [
    "EMAIL_PATTERN",
    "INVALID_EMAIL_MESSAGE",
    "INVALID_EVENT_ID_MESSAGE",
    "MAX_EMAIL_LENGTH",
    "MAX_EVENT_ID_LENGTH",
    "MAX_EVENT_NAME_LENGTH",
    "MISSING_FIELDS_MESSAGE",
    "TRACKING_CONFIRMED_MESSAGE",
    "TrackingResult",
    "TrackingService",
    "is_valid_email",
]
