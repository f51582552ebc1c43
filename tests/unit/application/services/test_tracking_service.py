"""Tests for tracking request validation."""

from unittest.mock import AsyncMock

import pytest

from ticketalert.application.services.tracking_service import (
    INVALID_EMAIL_MESSAGE,
    INVALID_EVENT_ID_MESSAGE,
    MAX_EMAIL_LENGTH,
    MAX_EVENT_ID_LENGTH,
    MAX_EVENT_NAME_LENGTH,
    MISSING_FIELDS_MESSAGE,
    TRACKING_CONFIRMED_MESSAGE,
    TrackingService,
    is_valid_email,
)
from ticketalert.domain.entities import UNKNOWN_EVENT_NAME, TrackedSubscription
from ticketalert.domain.exceptions import DuplicateSubscriptionError, ValidationException
from ticketalert.domain.ports import ISubscriptionStore


@pytest.fixture
def store() -> AsyncMock:
    store = AsyncMock(spec=ISubscriptionStore)
    store.create.return_value = TrackedSubscription(
        id="sub-1", event_id="evt-1", event_name="Aurora", email="ola@example.no"
    )
    return store


@pytest.mark.parametrize(
    ("email", "valid"),
    [
        ("ola@example.no", True),
        ("a.b+c@sub.example.com", True),
        ("ola@example", False),
        ("ola example@x.no", False),
        ("@example.no", False),
        ("ola@@example.no", False),
    ],
)
def test_is_valid_email(email: str, valid: bool) -> None:
    assert is_valid_email(email) is valid


class TestTrackingService:
    async def test_stores_subscription(self, store: AsyncMock) -> None:
        result = await TrackingService(store).track(" evt-1 ", " ola@example.no ", "Aurora")

        store.create.assert_awaited_once_with(
            event_id="evt-1", event_name="Aurora", email="ola@example.no"
        )
        assert result.message == TRACKING_CONFIRMED_MESSAGE
        assert result.stored is True

    async def test_missing_event_name_defaults(self, store: AsyncMock) -> None:
        await TrackingService(store).track("evt-1", "ola@example.no", None)
        assert store.create.await_args.kwargs["event_name"] == UNKNOWN_EVENT_NAME

    @pytest.mark.parametrize(("event_id", "email"), [(None, "a@b.no"), ("evt", ""), ("", "")])
    async def test_missing_fields(self, store: AsyncMock, event_id, email) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await TrackingService(store).track(event_id, email)
        assert exc_info.value.message == MISSING_FIELDS_MESSAGE
        store.create.assert_not_awaited()

    async def test_invalid_email(self, store: AsyncMock) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await TrackingService(store).track("evt-1", "not-an-email")
        assert exc_info.value.message == INVALID_EMAIL_MESSAGE

    async def test_event_id_longer_than_column_is_rejected(self, store: AsyncMock) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await TrackingService(store).track("e" * (MAX_EVENT_ID_LENGTH + 1), "ola@example.no")
        assert exc_info.value.message == INVALID_EVENT_ID_MESSAGE
        store.create.assert_not_awaited()

    async def test_event_id_at_column_width_is_accepted(self, store: AsyncMock) -> None:
        await TrackingService(store).track("e" * MAX_EVENT_ID_LENGTH, "ola@example.no")
        assert store.create.await_args.kwargs["event_id"] == "e" * MAX_EVENT_ID_LENGTH

    async def test_email_longer_than_column_is_rejected(self, store: AsyncMock) -> None:
        email = "o" * (MAX_EMAIL_LENGTH - len("@example.no") + 1) + "@example.no"
        assert len(email) == MAX_EMAIL_LENGTH + 1

        with pytest.raises(ValidationException) as exc_info:
            await TrackingService(store).track("evt-1", email)
        assert exc_info.value.message == INVALID_EMAIL_MESSAGE
        store.create.assert_not_awaited()

    async def test_long_event_name_is_truncated(self, store: AsyncMock) -> None:
        await TrackingService(store).track("evt-1", "ola@example.no", "A" * 2000)
        assert store.create.await_args.kwargs["event_name"] == "A" * MAX_EVENT_NAME_LENGTH

    async def test_duplicate_propagates(self, store: AsyncMock) -> None:
        store.create.side_effect = DuplicateSubscriptionError("evt-1", "ola@example.no")
        with pytest.raises(DuplicateSubscriptionError):
            await TrackingService(store).track("evt-1", "ola@example.no")

    async def test_demo_mode_is_not_stored(self, store: AsyncMock) -> None:
        store.create.return_value = None
        result = await TrackingService(store).track("evt-1", "ola@example.no")
        assert result.stored is False
        assert result.message == TRACKING_CONFIRMED_MESSAGE
