"""API request/response schemas."""

from ticketalert.api.schemas.concerts import (
    BrowseResponse,
    ConcertListResponse,
    ResaleCheckResponse,
)
from ticketalert.api.schemas.notifications import (
    SweepResponse,
    TestEmailRequest,
    TestEmailResponse,
    TrackRequest,
    TrackResponse,
)
from ticketalert.api.schemas.spotify import (
    ArtistMatchItem,
    LogoutResponse,
    TopArtistItem,
    TopArtistsResponse,
)

__all__ = [
    "ArtistMatchItem",
    "BrowseResponse",
    "ConcertListResponse",
    "LogoutResponse",
    "ResaleCheckResponse",
    "SweepResponse",
    "TestEmailRequest",
    "TestEmailResponse",
    "TopArtistItem",
    "TopArtistsResponse",
    "TrackRequest",
    "TrackResponse",
]
