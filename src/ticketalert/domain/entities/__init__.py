"""Domain entities."""

import datetime as dt
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

# Display placeholders when Ticketmaster omits venue data. UNKNOWN_CITY is also
# excluded from the city filter options.
UNKNOWN_VENUE = "Ukjent sted"
UNKNOWN_CITY = "Ukjent by"
UNKNOWN_EVENT_NAME = "Ukjent arrangement"
PLACEHOLDER_IMAGE = "/placeholder-concert.jpg"


class EventCategory(str, Enum):
    """UI category filter values and their Ticketmaster classification names."""

    ALL = "all"
    MUSIC = "music"
    ARTS = "arts"
    SPORTS = "sports"
    FAMILY = "family"
    MISCELLANEOUS = "miscellaneous"

    @property
    def classification_name(self) -> str | None:
        """Ticketmaster classificationName, or None for 'all' (no filter)."""
        return _CLASSIFICATION_NAMES.get(self)


_CLASSIFICATION_NAMES: dict[EventCategory, str] = {
    EventCategory.MUSIC: "Music",
    EventCategory.ARTS: "Arts & Theatre",
    EventCategory.SPORTS: "Sports",
    EventCategory.FAMILY: "Family",
    EventCategory.MISCELLANEOUS: "Miscellaneous",
}


class ArtistLocale(str, Enum):
    """Whether an artist group is Norwegian or international."""

    DOMESTIC = "NO"
    INTERNATIONAL = "INT"


@dataclass(frozen=True)
class PriceRange:
    """Lowest/highest listed ticket price. Ticketmaster sometimes sends partial entries."""

    min: float | None = None
    max: float | None = None
    currency: str | None = None


# Hey future me, Concert is what the rest of the app sees - never the raw Ticketmaster dict!
# The mapping lives in the catalog service (map_event). date is a real date object so
# grouping/sorting never has to parse strings; time is optional because Ticketmaster
# leaves it out for "TBA" events.
@dataclass(frozen=True)
class Concert:
    """One upcoming event listing."""

    id: str
    name: str
    date: dt.date
    venue: str
    city: str
    image_url: str
    url: str
    time: dt.time | None = None
    price_range: PriceRange | None = None

    @property
    def sort_key(self) -> tuple[dt.date, dt.time]:
        return (self.date, self.time or dt.time.min)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date.isoformat(),
            "time": self.time.strftime("%H:%M:%S") if self.time else None,
            "venue": self.venue,
            "city": self.city,
            "imageUrl": self.image_url,
            "url": self.url,
            "priceRange": (
                {
                    "min": self.price_range.min,
                    "max": self.price_range.max,
                    "currency": self.price_range.currency,
                }
                if self.price_range
                else None
            ),
        }


@dataclass(frozen=True)
class EventPage:
    """One page of catalog results."""

    concerts: list[Concert]
    total_pages: int
    total_elements: int
    current_page: int = 0

    @classmethod
    def empty(cls, page: int = 0) -> "EventPage":
        return cls(concerts=[], total_pages=0, total_elements=0, current_page=page)


@dataclass
class ArtistGroup:
    """Concerts sharing one exact display name, sorted by date."""

    name: str
    image_url: str
    locale: ArtistLocale
    concerts: list[Concert] = field(default_factory=list)
    listening_score: int = 0
    matched_artist: str | None = None

    @property
    def first_date(self) -> dt.date | None:
        return self.concerts[0].date if self.concerts else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "imageUrl": self.image_url,
            "locale": self.locale.value,
            "listeningScore": self.listening_score,
            "matchedArtist": self.matched_artist,
            "concerts": [concert.to_dict() for concert in self.concerts],
        }


@dataclass(frozen=True)
class ResaleStatus:
    """Outcome of one resale check."""

    has_resale: bool
    info: str


@dataclass(frozen=True)
class TrackedSubscription:
    """A pending (or fulfilled) request to email someone about resale tickets."""

    id: str
    event_id: str
    event_name: str
    email: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    notified_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.notified_at is None


@dataclass(frozen=True)
class ResaleAlert:
    """Everything the email sender needs for one resale notification."""

    to: str
    event_name: str
    event_date: dt.date
    venue: str
    purchase_url: str


@dataclass(frozen=True)
class SweepItemResult:
    event_id: str
    has_resale: bool
    notified: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventId": self.event_id,
            "hasResale": self.has_resale,
            "notified": self.notified,
        }


@dataclass
class SweepReport:
    """Summary of one notification sweep pass."""

    checked: int = 0
    notified: int = 0
    results: list[SweepItemResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None


# Hey future me, the Spotify "session" is just whatever the browser's cookies carry. It's passed
# explicitly into every operation that needs it - there's no server-side session store.
@dataclass(frozen=True)
class SpotifyUser:
    """Public profile bits shown in the UI (stored in a readable cookie)."""

    id: str
    name: str
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "image": self.image}


@dataclass(frozen=True)
class SpotifySession:
    access_token: str | None = None
    refresh_token: str | None = None
    user: SpotifyUser | None = None

    @property
    def is_connected(self) -> bool:
        return bool(self.access_token or self.refresh_token)


@dataclass(frozen=True)
class SpotifyTokens:
    """Token grant from Spotify (code exchange or refresh)."""

    access_token: str
    expires_in: int = 3600
    refresh_token: str | None = None


__all__ = [
    "PLACEHOLDER_IMAGE",
    "UNKNOWN_CITY",
    "UNKNOWN_EVENT_NAME",
    "UNKNOWN_VENUE",
    "ArtistGroup",
    "ArtistLocale",
    "Concert",
    "EventCategory",
    "EventPage",
    "PriceRange",
    "ResaleAlert",
    "ResaleStatus",
    "SpotifySession",
    "SpotifyTokens",
    "SpotifyUser",
    "SweepItemResult",
    "SweepReport",
    "TrackedSubscription",
]
