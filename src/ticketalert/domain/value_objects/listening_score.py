"""Listening scores and the artist match index.

Hey future me - this is the whole personalization heuristic in one place:

1. Spotify gives us up to three ranked top-artist lists (short/medium/long term).
2. build_match_index() merges them into one index keyed by normalized name,
   recent listening first. An artist keeps the score of the FIRST window it
   appears in, so someone you played last week never gets demoted because they
   also sit low in your all-time list.
3. match_event() looks an event name up in that index: exact key first, then
   bidirectional substring ("kygo" matches "kygo palm trees tour").

Scores are 0-100 ints. 0 always means "no match", never "disliked".
"""

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from ticketalert.domain.value_objects.artist_normalization import normalize_artist_name


class TimeRange(str, Enum):
    """Spotify top-items time windows, most recent first."""

    SHORT_TERM = "short_term"  # ~4 weeks
    MEDIUM_TERM = "medium_term"  # ~6 months
    LONG_TERM = "long_term"  # years


# Base offset per window. Position bonus adds up to 50 on top.
WINDOW_BASE_SCORES: dict[TimeRange, int] = {
    TimeRange.SHORT_TERM: 50,
    TimeRange.MEDIUM_TERM: 25,
    TimeRange.LONG_TERM: 0,
}
POSITION_BONUS_WEIGHT = 50


def _round_half_up(value: float) -> int:
    # round() in Python does banker's rounding (round(2.5) == 2); scores round .5 up.
    return math.floor(value + 0.5)


def calculate_listening_score(position: int, total: int) -> int:
    """Convert a 0-based rank in a list of ``total`` artists into a 1-100 score.

    Rank 0 always scores 100, the last rank scores round(100 / total).

    Args:
        position: 0-based position in the ranked list
        total: Length of the ranked list (>= 1)

    Returns:
        Score in [1, 100], non-increasing in position

    Raises:
        ValueError: If total < 1 or position is outside [0, total)
    """
    if total < 1:
        raise ValueError(f"total must be >= 1, got {total}")
    if not 0 <= position < total:
        raise ValueError(f"position must be in [0, {total}), got {position}")
    return _round_half_up(((total - position) / total) * 100)


@dataclass(frozen=True)
class TopArtist:
    """One entry of a Spotify top-artists list."""

    id: str
    name: str
    image_url: str | None = None

    @classmethod
    def from_spotify(cls, item: dict) -> "TopArtist":
        images = item.get("images") or []
        return cls(
            id=str(item.get("id", "")),
            name=str(item.get("name", "")),
            image_url=images[0].get("url") if images else None,
        )


@dataclass(frozen=True)
class ArtistMatch:
    """Index value: the score and the display name it came from."""

    score: int
    original_name: str


@dataclass(frozen=True)
class RankedArtist:
    """Flat list entry for UI display."""

    name: str
    score: int
    image_url: str | None = None


@dataclass(frozen=True)
class EventMatch:
    """Result of matching one event name against the index."""

    score: int = 0
    matched_artist: str | None = None

    @property
    def is_match(self) -> bool:
        return self.matched_artist is not None


@dataclass
class ArtistMatchIndex:
    """Normalized artist name -> ArtistMatch, in insertion order.

    Insertion order is the ranked order (score desc), which is also the order
    the substring fallback walks. Immutable by convention after construction.
    """

    entries: dict[str, ArtistMatch] = field(default_factory=dict)
    ranked: list[RankedArtist] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, normalized_name: object) -> bool:
        return normalized_name in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def get(self, normalized_name: str) -> ArtistMatch | None:
        return self.entries.get(normalized_name)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def to_match_map(self) -> dict[str, dict[str, int | str]]:
        """JSON-friendly view: {normalized: {"score": .., "originalName": ..}}."""
        return {
            key: {"score": match.score, "originalName": match.original_name}
            for key, match in self.entries.items()
        }

    @classmethod
    def from_ranking(cls, artists: Sequence[TopArtist]) -> "ArtistMatchIndex":
        """Index a single ranked list, scoring each entry by its rank.

        Used when the caller asks for one specific time window instead of the
        merged three-window view.
        """
        ranked: list[RankedArtist] = []
        entries: dict[str, ArtistMatch] = {}
        total = len(artists)
        for position, artist in enumerate(artists):
            key = normalize_artist_name(artist.name)
            if not key or key in entries:
                continue
            score = calculate_listening_score(position, total)
            entries[key] = ArtistMatch(score=score, original_name=artist.name)
            ranked.append(RankedArtist(artist.name, score, artist.image_url))
        return cls(entries=entries, ranked=ranked)


def _window_scores(
    artists: Sequence[TopArtist], base: int
) -> Iterable[tuple[TopArtist, int]]:
    total = len(artists)
    for index, artist in enumerate(artists):
        bonus = ((total - index) / total) * POSITION_BONUS_WEIGHT
        yield artist, _round_half_up(base + bonus)


def build_match_index(
    short_term: Sequence[TopArtist] = (),
    medium_term: Sequence[TopArtist] = (),
    long_term: Sequence[TopArtist] = (),
) -> ArtistMatchIndex:
    """Merge the three top-artist windows into one index.

    Windows are processed short -> medium -> long. The first window an artist
    appears in (matched by Spotify id or by normalized name) decides its score:
    short in [51, 100], medium in [26, 75], long in [1, 50]. Any window may be
    empty, e.g. when its fetch failed.

    Args:
        short_term: Recent top artists, rank order
        medium_term: ~6 month top artists, rank order
        long_term: All-time top artists, rank order

    Returns:
        ArtistMatchIndex whose keys are ordered by score descending
    """
    seen_ids: set[str] = set()
    seen_keys: set[str] = set()
    merged: list[tuple[str, TopArtist, int]] = []

    windows = (
        (short_term, WINDOW_BASE_SCORES[TimeRange.SHORT_TERM]),
        (medium_term, WINDOW_BASE_SCORES[TimeRange.MEDIUM_TERM]),
        (long_term, WINDOW_BASE_SCORES[TimeRange.LONG_TERM]),
    )
    for artists, base in windows:
        for artist, score in _window_scores(artists, base):
            key = normalize_artist_name(artist.name)
            if not key:
                continue
            if (artist.id and artist.id in seen_ids) or key in seen_keys:
                continue
            if artist.id:
                seen_ids.add(artist.id)
            seen_keys.add(key)
            merged.append((key, artist, score))

    # sorted() is stable, so equal scores keep window-then-rank order
    merged.sort(key=lambda item: item[2], reverse=True)

    return ArtistMatchIndex(
        entries={
            key: ArtistMatch(score=score, original_name=artist.name)
            for key, artist, score in merged
        },
        ranked=[
            RankedArtist(name=artist.name, score=score, image_url=artist.image_url)
            for _, artist, score in merged
        ],
    )


def match_event(name: str, index: ArtistMatchIndex) -> EventMatch:
    """Score an event or artist display name against the index.

    Exact normalized lookup first, then the first index key (in insertion
    order) that contains, or is contained in, the normalized name. Never
    raises; an empty name or empty index scores 0.
    """
    normalized = normalize_artist_name(name)
    if not normalized or index.is_empty:
        return EventMatch()

    exact = index.get(normalized)
    if exact is not None:
        return EventMatch(score=exact.score, matched_artist=exact.original_name)

    for key, match in index.entries.items():
        if key in normalized or normalized in key:
            return EventMatch(score=match.score, matched_artist=match.original_name)

    return EventMatch()


__all__ = [
    "ArtistMatch",
    "ArtistMatchIndex",
    "EventMatch",
    "POSITION_BONUS_WEIGHT",
    "RankedArtist",
    "TimeRange",
    "TopArtist",
    "WINDOW_BASE_SCORES",
    "build_match_index",
    "calculate_listening_score",
    "match_event",
]
