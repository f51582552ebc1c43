"""Notification sweep trigger, called by an external scheduler."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ticketalert.api.dependencies import get_resale_sweep, verify_cron_secret
from ticketalert.api.exception_handlers import error_response
from ticketalert.api.schemas import SweepResponse
from ticketalert.application.workers.resale_sweep_worker import ResaleSweep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sweep"])

NOTHING_TO_CHECK_MESSAGE = "Ingen arrangementer å sjekke"
SWEEP_FAILED_MESSAGE = "Feil ved sjekking av arrangementer"


@router.get(
    "/check-and-notify",
    response_model=SweepResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_cron_secret)],
)
async def check_and_notify(
    sweep: Annotated[ResaleSweep, Depends(get_resale_sweep)],
) -> SweepResponse | JSONResponse:
    """Run one notification pass over all pending subscriptions."""
    try:
        report = await sweep.run_once()
    except Exception:
        logger.exception("[SWEEP] Pass failed")
        return error_response(500, SWEEP_FAILED_MESSAGE)

    if report.checked == 0:
        return SweepResponse(message=NOTHING_TO_CHECK_MESSAGE, checked=0, notified=0)

    return SweepResponse(
        message=f"Sjekket {report.checked} arrangementer",
        checked=report.checked,
        notified=report.notified,
        results=[item.to_dict() for item in report.results],
    )
