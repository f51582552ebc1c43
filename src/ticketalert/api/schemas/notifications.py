"""API schemas for tracking, the notification sweep and test emails."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# Hey future me, every field here is optional ON PURPOSE at the schema level. A missing eventId
# must come back as {"error": "eventId og email er påkrevd"} from TrackingService, not as a
# pydantic 422/400 with field locations the frontend can't show.
class TrackRequest(BaseModel):
    """Body of POST /api/track."""

    model_config = ConfigDict(populate_by_name=True)

    event_id: str | None = Field(default=None, alias="eventId")
    event_name: str | None = Field(default=None, alias="eventName")
    email: str | None = None


class TrackResponse(BaseModel):
    success: bool = True
    message: str
    stored: bool = Field(
        default=True, description="False when running without a database (demo mode)"
    )


class SweepResponse(BaseModel):
    """Result of GET /api/check-and-notify."""

    message: str
    checked: int
    notified: int
    results: list[dict[str, Any]] | None = None


class TestEmailRequest(BaseModel):
    email: str | None = None


class TestEmailResponse(BaseModel):
    success: bool = True
    message: str
