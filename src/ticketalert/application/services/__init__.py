"""Application services."""

from ticketalert.application.services.concert_catalog_service import ConcertCatalogService
from ticketalert.application.services.personalization_service import (
    PersonalizationService,
    SpotifyAuthService,
)
from ticketalert.application.services.resale_checker import ResaleChecker
from ticketalert.application.services.tracking_service import TrackingService

__all__ = [
    "ConcertCatalogService",
    "PersonalizationService",
    "ResaleChecker",
    "SpotifyAuthService",
    "TrackingService",
]
