"""API schemas for the Spotify integration."""

from pydantic import BaseModel, ConfigDict, Field


class TopArtistItem(BaseModel):
    name: str
    score: int
    image: str | None = None


class ArtistMatchItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    score: int
    original_name: str = Field(..., alias="originalName")


class TopArtistsResponse(BaseModel):
    """Ranked top artists plus the normalized-name match map."""

    model_config = ConfigDict(populate_by_name=True)

    artists: list[TopArtistItem]
    match_map: dict[str, ArtistMatchItem] = Field(..., alias="matchMap")
    total: int


class LogoutResponse(BaseModel):
    success: bool = True
