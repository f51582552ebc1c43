"""Tests for resale alert rendering and Resend delivery."""

import datetime as dt
import json

import httpx
import pytest

from ticketalert.config import EmailSettings
from ticketalert.domain.entities import ResaleAlert
from ticketalert.infrastructure.notifications import (
    ResendEmailProvider,
    UnconfiguredEmailSender,
    create_email_sender,
)
from ticketalert.infrastructure.notifications.email_provider import (
    SEND_FAILED_MESSAGE,
    build_subject,
    format_norwegian_date,
    render_resale_alert,
)

ALERT = ResaleAlert(
    to="ola@example.no",
    event_name="Aurora - What Happened To The Heart Tour",
    event_date=dt.date(2026, 3, 15),
    venue="Oslo Spektrum, Oslo",
    purchase_url="https://www.ticketmaster.no/event/123",
)


@pytest.fixture
def email_settings() -> EmailSettings:
    return EmailSettings(RESEND_API_KEY="re_test")


def make_provider(settings: EmailSettings, handler) -> ResendEmailProvider:
    return ResendEmailProvider(
        settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


class TestRendering:
    @pytest.mark.parametrize(
        ("date", "expected"),
        [
            (dt.date(2026, 3, 15), "søndag 15. mars 2026"),
            (dt.date(2026, 5, 1), "fredag 1. mai 2026"),
            (dt.date(2025, 12, 24), "onsdag 24. desember 2025"),
        ],
    )
    def test_norwegian_date(self, date: dt.date, expected: str) -> None:
        assert format_norwegian_date(date) == expected

    def test_subject(self) -> None:
        assert build_subject("Kygo") == "🎫 Videresolgte billetter tilgjengelig: Kygo"

    def test_body_contains_event_data(self) -> None:
        html = render_resale_alert(ALERT)
        assert "Aurora - What Happened To The Heart Tour" in html
        assert "søndag 15. mars 2026" in html
        assert "Oslo Spektrum, Oslo" in html
        assert "https://www.ticketmaster.no/event/123" in html

    def test_body_escapes_html(self) -> None:
        alert = ResaleAlert(
            to="x@example.no",
            event_name="<script>alert(1)</script>",
            event_date=dt.date(2026, 1, 1),
            venue="A & B",
            purchase_url="https://www.ticketmaster.no",
        )
        html = render_resale_alert(alert)
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html


class TestResendEmailProvider:
    async def test_posts_expected_payload(self, email_settings: EmailSettings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "msg-1"})

        result = await make_provider(email_settings, handler).send_resale_alert(ALERT)

        assert result.success is True
        assert result.external_id == "msg-1"
        request = seen[0]
        body = json.loads(request.content)
        assert str(request.url) == "https://api.resend.com/emails"
        assert request.headers["Authorization"] == "Bearer re_test"
        assert body["from"] == "TicketAlert Norge <onboarding@resend.dev>"
        assert body["to"] == ["ola@example.no"]
        assert body["subject"] == build_subject(ALERT.event_name)
        assert "søndag 15. mars 2026" in body["html"]

    async def test_rejection_returns_provider_message(self, email_settings: EmailSettings) -> None:
        provider = make_provider(
            email_settings,
            lambda r: httpx.Response(422, json={"message": "Invalid `to` field"}),
        )
        result = await provider.send_resale_alert(ALERT)
        assert result.success is False
        assert result.error == "Invalid `to` field"

    async def test_transport_error_is_generic_failure(self, email_settings: EmailSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("slow", request=request)

        result = await make_provider(email_settings, handler).send_resale_alert(ALERT)
        assert result.success is False
        assert result.error == SEND_FAILED_MESSAGE


class TestSenderSelection:
    def test_unconfigured_without_key(self) -> None:
        sender = create_email_sender(EmailSettings(RESEND_API_KEY=""))
        assert isinstance(sender, UnconfiguredEmailSender)
        assert sender.is_configured is False

    def test_resend_with_key(self, email_settings: EmailSettings) -> None:
        assert isinstance(create_email_sender(email_settings), ResendEmailProvider)

    async def test_unconfigured_sender_reports_success(self) -> None:
        result = await UnconfiguredEmailSender().send_resale_alert(ALERT)
        assert result.success is True
