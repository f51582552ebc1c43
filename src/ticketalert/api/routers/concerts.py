"""Concert listing endpoints.

Hey future me - two views of the same Ticketmaster data:
- GET /concerts         one raw page, exactly what the upstream returned (mapped)
- GET /concerts/browse  up to MAX_PREFETCH_PAGES pages, grouped per artist, filtered,
                        and scored against the visitor's Spotify profile if the
                        Spotify cookies are present

Both degrade to empty lists when Ticketmaster is down or unconfigured - the catalog
service never raises for upstream problems.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from ticketalert.api.cookies import set_access_token_cookie
from ticketalert.api.dependencies import (
    get_app_settings,
    get_catalog_service,
    get_domestic_artists,
    get_personalization_service,
    get_spotify_session,
)
from ticketalert.api.schemas import BrowseResponse, ConcertListResponse
from ticketalert.application.services.artist_grouping import (
    ArtistOrigin,
    BrowseFilters,
    SortMode,
    apply_listening_scores,
    available_cities,
    filter_groups,
    group_concerts_by_artist,
)
from ticketalert.application.services.concert_catalog_service import (
    DEFAULT_PAGE_SIZE,
    ConcertCatalogService,
)
from ticketalert.application.services.personalization_service import PersonalizationService
from ticketalert.config import Settings
from ticketalert.domain.entities import EventCategory, SpotifySession
from ticketalert.domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/concerts", tags=["Concerts"])

# Ticketmaster's Discovery API refuses size > 200
MAX_PAGE_SIZE = 200


def _parse_category(value: str | None) -> EventCategory:
    """Unknown categories behave like 'all' instead of failing the request."""
    try:
        return EventCategory((value or EventCategory.ALL.value).lower())
    except ValueError:
        logger.debug("Unknown category %r, falling back to 'all'", value)
        return EventCategory.ALL


@router.get("", response_model=ConcertListResponse)
async def list_concerts(
    catalog: Annotated[ConcertCatalogService, Depends(get_catalog_service)],
    keyword: str | None = Query(default=None, description="Free-text search"),
    category: str | None = Query(default="all", description="all, music, arts, sports, ..."),
    page: int = Query(default=0, ge=0, description="0-based page index"),
    size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> ConcertListResponse:
    """One page of upcoming events in Norway, soonest first."""
    result = await catalog.list_events(
        keyword=keyword, category=_parse_category(category), page=page, page_size=size
    )
    return ConcertListResponse(
        concerts=[concert.to_dict() for concert in result.concerts],
        total=result.total_elements,
        total_pages=result.total_pages,
        current_page=result.current_page,
    )


# Yo, personalization is best effort here. Cookies present but Spotify says no (expired refresh
# token, revoked app)? Browse still works, just unscored. Only /spotify/top-artists surfaces 401.
@router.get("/browse", response_model=BrowseResponse)
async def browse_concerts(
    response: Response,
    catalog: Annotated[ConcertCatalogService, Depends(get_catalog_service)],
    personalization: Annotated[
        PersonalizationService, Depends(get_personalization_service)
    ],
    session: Annotated[SpotifySession, Depends(get_spotify_session)],
    domestic_artists: Annotated[tuple[str, ...], Depends(get_domestic_artists)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    keyword: str | None = Query(default=None),
    category: str | None = Query(default="music"),
    origin: ArtistOrigin = Query(default=ArtistOrigin.ALL),
    city: str | None = Query(default=None),
    q: str | None = Query(default=None, description="Filter on artist, venue or city"),
    sort: SortMode = Query(default=SortMode.DATE),
) -> BrowseResponse:
    """Concerts grouped per artist with the browse filters applied."""
    parsed_category = _parse_category(category)
    listing = await catalog.fetch_all_pages(keyword=keyword, category=parsed_category)
    groups = group_concerts_by_artist(listing.concerts, domestic_artists)

    personalized = False
    if session.is_connected:
        try:
            result = await personalization.get_match_index(session)
        except AuthenticationError as e:
            logger.info("Browsing without personalization: %s", e.message)
        else:
            groups = apply_listening_scores(groups, result.index)
            personalized = not result.index.is_empty
            if result.refreshed_tokens is not None:
                set_access_token_cookie(
                    response, result.refreshed_tokens, settings.cookie_secure
                )

    filtered = filter_groups(
        groups,
        BrowseFilters(
            category=parsed_category, origin=origin, city=city, query=q, sort=sort
        ),
        personalized=personalized,
    )
    return BrowseResponse(
        groups=[group.to_dict() for group in filtered],
        total=len(filtered),
        total_concerts=sum(len(group.concerts) for group in filtered),
        available_cities=available_cities(listing.concerts),
        personalized=personalized,
    )
