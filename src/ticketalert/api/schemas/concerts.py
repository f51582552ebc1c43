"""API schemas for concert listings and resale checks."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConcertListResponse(BaseModel):
    """One page of concerts as the frontend consumes it."""

    model_config = ConfigDict(populate_by_name=True)

    concerts: list[dict[str, Any]] = Field(..., description="Concerts in camelCase form")
    total: int = Field(..., description="Total number of upstream events")
    total_pages: int = Field(..., alias="totalPages")
    current_page: int = Field(..., alias="currentPage")


class BrowseResponse(BaseModel):
    """Grouped, filtered and optionally personalized concert listing."""

    model_config = ConfigDict(populate_by_name=True)

    groups: list[dict[str, Any]] = Field(..., description="Artist groups with their concerts")
    total: int = Field(..., description="Number of groups after filtering")
    total_concerts: int = Field(..., alias="totalConcerts")
    available_cities: list[str] = Field(..., alias="availableCities")
    personalized: bool = Field(
        default=False, description="Listening scores came from a Spotify profile"
    )


class ResaleCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_resale: bool = Field(..., alias="hasResale")
    info: str
