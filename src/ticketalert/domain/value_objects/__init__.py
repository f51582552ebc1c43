"""Domain value objects."""

from ticketalert.domain.value_objects.artist_normalization import normalize_artist_name
from ticketalert.domain.value_objects.listening_score import (
    ArtistMatch,
    ArtistMatchIndex,
    EventMatch,
    RankedArtist,
    TimeRange,
    TopArtist,
    build_match_index,
    calculate_listening_score,
    match_event,
)

__all__ = [
    "ArtistMatch",
    "ArtistMatchIndex",
    "EventMatch",
    "RankedArtist",
    "TimeRange",
    "TopArtist",
    "build_match_index",
    "calculate_listening_score",
    "match_event",
    "normalize_artist_name",
]
