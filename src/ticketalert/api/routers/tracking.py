"""Resale tracking subscriptions."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from ticketalert.api.dependencies import get_tracking_service
from ticketalert.api.schemas import TrackRequest, TrackResponse
from ticketalert.application.services.tracking_service import TrackingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tracking"])


@router.post("/track", response_model=TrackResponse)
async def track_event(
    body: TrackRequest,
    tracking: Annotated[TrackingService, Depends(get_tracking_service)],
) -> TrackResponse:
    """Ask to be emailed once resale tickets for an event appear.

    Missing fields, a malformed email and a duplicate (event, email) pair all
    come back as 400 via the registered exception handlers.
    """
    result = await tracking.track(
        event_id=body.event_id, email=body.email, event_name=body.event_name
    )
    if not result.stored:
        logger.warning("Tracking request for %s accepted but not stored", body.event_id)
    return TrackResponse(message=result.message, stored=result.stored)
