"""Resale availability endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ticketalert.api.dependencies import get_resale_checker
from ticketalert.api.schemas import ResaleCheckResponse
from ticketalert.application.services.resale_checker import ResaleChecker
from ticketalert.domain.exceptions import ValidationException

router = APIRouter(tags=["Resale"])

MISSING_EVENT_ID_MESSAGE = "eventId parameter er påkrevd"


@router.get("/check-resale", response_model=ResaleCheckResponse)
async def check_resale(
    checker: Annotated[ResaleChecker, Depends(get_resale_checker)],
    event_id: Annotated[str | None, Query(alias="eventId")] = None,
) -> ResaleCheckResponse:
    """Whether Ticketmaster currently shows resale tickets for an event."""
    if not event_id or not event_id.strip():
        raise ValidationException(MISSING_EVENT_ID_MESSAGE)
    status = await checker.check_resale(event_id.strip())
    return ResaleCheckResponse(has_resale=status.has_resale, info=status.info)
