"""Group concerts by artist, tag domestic artists, and apply browse filters."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from importlib import resources
from pathlib import Path

from ticketalert.domain.entities import (
    UNKNOWN_CITY,
    ArtistGroup,
    ArtistLocale,
    Concert,
    EventCategory,
)
from ticketalert.domain.value_objects.listening_score import ArtistMatchIndex, match_event

logger = logging.getLogger(__name__)

_BUNDLED_LIST = "domestic_artists.txt"


def _parse_artist_list(text: str) -> tuple[str, ...]:
    names: list[str] = []
    for line in text.splitlines():
        entry = line.strip().lower()
        if entry and not entry.startswith("#") and entry not in names:
            names.append(entry)
    return tuple(names)


def load_domestic_artists(path: Path | None = None) -> tuple[str, ...]:
    """Load the domestic (Norwegian) artist list.

    Args:
        path: Optional override file; defaults to the list bundled with the package

    Returns:
        Lowercased, de-duplicated names in file order
    """
    if path is not None:
        names = _parse_artist_list(path.read_text(encoding="utf-8"))
        logger.info("Loaded %d domestic artists from %s", len(names), path)
        return names
    bundled = resources.files("ticketalert").joinpath("data", _BUNDLED_LIST)
    return _parse_artist_list(bundled.read_text(encoding="utf-8"))


def detect_locale(name: str, domestic_artists: Iterable[str]) -> ArtistLocale:
    """DOMESTIC if the lowercased name contains any list entry (substring match)."""
    lowered = name.lower()
    if any(artist in lowered for artist in domestic_artists):
        return ArtistLocale.DOMESTIC
    return ArtistLocale.INTERNATIONAL


# Hey future me, grouping is by EXACT display name. "Aurora" and "AURORA - Live" are two groups.
# That's what the product always did; the fuzzy stuff only happens in Spotify matching.
def group_concerts_by_artist(
    concerts: Iterable[Concert], domestic_artists: Sequence[str] = ()
) -> list[ArtistGroup]:
    """Group concerts by display name, keeping first-appearance order of groups.

    Each group's concerts are sorted by date (then start time, unknown time
    first), and the group image is taken from its earliest concert.
    """
    buckets: dict[str, list[Concert]] = {}
    for concert in concerts:
        buckets.setdefault(concert.name, []).append(concert)

    groups = []
    for name, items in buckets.items():
        ordered = sorted(items, key=lambda c: c.sort_key)
        groups.append(
            ArtistGroup(
                name=name,
                image_url=ordered[0].image_url,
                locale=detect_locale(name, domestic_artists),
                concerts=ordered,
            )
        )
    return groups


def apply_listening_scores(
    groups: Iterable[ArtistGroup], index: ArtistMatchIndex
) -> list[ArtistGroup]:
    scored = []
    for group in groups:
        match = match_event(group.name, index)
        scored.append(
            replace(group, listening_score=match.score, matched_artist=match.matched_artist)
        )
    return scored


def available_cities(concerts: Iterable[Concert]) -> list[str]:
    """Sorted distinct cities, without the unknown-city placeholder."""
    return sorted({c.city for c in concerts if c.city and c.city != UNKNOWN_CITY})


class ArtistOrigin(str, Enum):
    ALL = "all"
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"


class SortMode(str, Enum):
    DATE = "date"
    FOR_YOU = "for_you"


@dataclass(frozen=True)
class BrowseFilters:
    """Filters of the browse view. Defaults select everything in upstream order."""

    category: EventCategory = EventCategory.ALL
    origin: ArtistOrigin = ArtistOrigin.ALL
    city: str | None = None
    query: str | None = None
    sort: SortMode = SortMode.DATE


def filter_groups(
    groups: Sequence[ArtistGroup],
    filters: BrowseFilters,
    personalized: bool = False,
) -> list[ArtistGroup]:
    """Apply origin, city and text filters, then the requested ordering.

    Origin only applies to the music category. The city filter narrows each
    group's concerts and drops groups left empty. 'for_you' sorting needs a
    connected Spotify profile (``personalized``); otherwise upstream order stays.
    """
    result = list(groups)

    if filters.category is EventCategory.MUSIC and filters.origin is not ArtistOrigin.ALL:
        wanted = (
            ArtistLocale.DOMESTIC
            if filters.origin is ArtistOrigin.DOMESTIC
            else ArtistLocale.INTERNATIONAL
        )
        result = [group for group in result if group.locale is wanted]

    if filters.city and filters.city.lower() != "all":
        city = filters.city.lower()
        narrowed = []
        for group in result:
            concerts = [c for c in group.concerts if c.city.lower() == city]
            if concerts:
                narrowed.append(replace(group, concerts=concerts))
        result = narrowed

    query = (filters.query or "").strip().lower()
    if query:
        result = [
            group
            for group in result
            if query in group.name.lower()
            or any(query in c.venue.lower() or query in c.city.lower() for c in group.concerts)
        ]

    if filters.sort is SortMode.FOR_YOU and personalized:
        result.sort(key=lambda group: (-group.listening_score, group.concerts[0].sort_key))

    return result


__all__ = [
    "ArtistOrigin",
    "BrowseFilters",
    "SortMode",
    "apply_listening_scores",
    "available_cities",
    "detect_locale",
    "filter_groups",
    "group_concerts_by_artist",
    "load_domestic_artists",
]
