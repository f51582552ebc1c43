"""Diagnostics: send a sample resale alert to check the email setup."""

import datetime as dt
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ticketalert.api.dependencies import get_email_sender
from ticketalert.api.exception_handlers import error_response
from ticketalert.api.schemas import TestEmailRequest, TestEmailResponse
from ticketalert.domain.entities import ResaleAlert
from ticketalert.domain.exceptions import ValidationException
from ticketalert.domain.ports import IEmailSender

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Email"])

EMAIL_REQUIRED_MESSAGE = "Email er påkrevd"

# Yo, the sample event is fixed so the rendered email is the same every time - easy to eyeball
SAMPLE_EVENT_NAME = "Aurora - What Happened To The Heart Tour (TEST)"
SAMPLE_EVENT_DATE = dt.date(2026, 3, 15)
SAMPLE_VENUE = "Oslo Spektrum, Oslo"
SAMPLE_PURCHASE_URL = "https://www.ticketmaster.no"


@router.post("/test-email", response_model=TestEmailResponse)
async def send_test_email(
    body: TestEmailRequest,
    sender: Annotated[IEmailSender, Depends(get_email_sender)],
) -> TestEmailResponse | JSONResponse:
    email = (body.email or "").strip()
    if not email:
        raise ValidationException(EMAIL_REQUIRED_MESSAGE)

    result = await sender.send_resale_alert(
        ResaleAlert(
            to=email,
            event_name=SAMPLE_EVENT_NAME,
            event_date=SAMPLE_EVENT_DATE,
            venue=SAMPLE_VENUE,
            purchase_url=SAMPLE_PURCHASE_URL,
        )
    )
    if not result.success:
        logger.error("Test email via %s failed: %s", result.provider_name, result.error)
        return error_response(500, result.error or "Kunne ikke sende test-e-post")

    return TestEmailResponse(message=f"Test-e-post sendt til {email}")
