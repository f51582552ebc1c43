"""Resale alert email delivery via the Resend REST API.

Hey future me - two senders live here, picked once at startup by
create_email_sender():

- ResendEmailProvider: renders templates/email/resale_alert.html with Jinja2
  and POSTs it to https://api.resend.com/emails.
- UnconfiguredEmailSender: RESEND_API_KEY missing. Logs and reports success
  so demo deployments behave like the real thing (subscriptions get marked
  notified). That's intentional product behavior, not a bug.

Neither raises. Failures become EmailResult(success=False, error=...).
"""

import datetime as dt
import logging
from pathlib import Path
from typing import Any

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ticketalert.config.settings import EmailSettings
from ticketalert.domain.entities import ResaleAlert
from ticketalert.domain.ports import EmailResult, IEmailSender

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"
RESALE_ALERT_TEMPLATE = "email/resale_alert.html"
SUBJECT_PREFIX = "🎫 Videresolgte billetter tilgjengelig"
SEND_FAILED_MESSAGE = "Kunne ikke sende e-post"

# nb-NO long date parts, Monday = 0
_WEEKDAYS_NB = ("mandag", "tirsdag", "onsdag", "torsdag", "fredag", "lørdag", "søndag")
_MONTHS_NB = (
    "januar",
    "februar",
    "mars",
    "april",
    "mai",
    "juni",
    "juli",
    "august",
    "september",
    "oktober",
    "november",
    "desember",
)


def format_norwegian_date(value: dt.date) -> str:
    """Format a date the way nb-NO long dates read: 'søndag 15. mars 2026'."""
    return (
        f"{_WEEKDAYS_NB[value.weekday()]} {value.day}. "
        f"{_MONTHS_NB[value.month - 1]} {value.year}"
    )


def build_subject(event_name: str) -> str:
    return f"{SUBJECT_PREFIX}: {event_name}"


_environment = Environment(
    loader=FileSystemLoader(str(_TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_resale_alert(alert: ResaleAlert) -> str:
    """Render the HTML body for a resale alert. Event data is HTML-escaped."""
    template = _environment.get_template(RESALE_ALERT_TEMPLATE)
    return template.render(
        event_name=alert.event_name,
        event_date=format_norwegian_date(alert.event_date),
        venue=alert.venue,
        purchase_url=alert.purchase_url,
        year=dt.date.today().year,
    )


class ResendEmailProvider(IEmailSender):
    """Sends resale alerts through Resend."""

    def __init__(
        self, settings: EmailSettings, client: httpx.AsyncClient | None = None
    ) -> None:
        self.settings = settings
        self._client = client

    @property
    def name(self) -> str:
        return "resend"

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_payload(self, alert: ResaleAlert) -> dict[str, Any]:
        return {
            "from": self.settings.from_address,
            "to": [alert.to],
            "subject": build_subject(alert.event_name),
            "html": render_resale_alert(alert),
        }

    async def send_resale_alert(self, alert: ResaleAlert) -> EmailResult:
        try:
            client = await self._get_client()
            response = await client.post(
                self.settings.api_url,
                json=self._build_payload(alert),
                headers={"Authorization": f"Bearer {self.settings.api_key}"},
            )
        except httpx.HTTPError as e:
            logger.error(
                "[NOTIFICATION] Resend request failed for event '%s': %s",
                alert.event_name,
                e,
            )
            return EmailResult(success=False, provider_name=self.name, error=SEND_FAILED_MESSAGE)

        if response.is_error:
            error = _extract_error_message(response)
            logger.error(
                "[NOTIFICATION] Resend rejected email for event '%s' (HTTP %s): %s",
                alert.event_name,
                response.status_code,
                error,
            )
            return EmailResult(success=False, provider_name=self.name, error=error)

        message_id = _extract_message_id(response)
        logger.info(
            "[NOTIFICATION] Resale alert sent for event '%s' (id=%s)",
            alert.event_name,
            message_id,
        )
        return EmailResult(success=True, provider_name=self.name, external_id=message_id)


def _extract_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"


def _extract_message_id(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return str(body["id"]) if isinstance(body, dict) and body.get("id") else None


class UnconfiguredEmailSender(IEmailSender):
    """Demo-mode sender: logs instead of sending and reports success."""

    @property
    def name(self) -> str:
        return "unconfigured"

    @property
    def is_configured(self) -> bool:
        return False

    async def send_resale_alert(self, alert: ResaleAlert) -> EmailResult:
        logger.info(
            "[NOTIFICATION] Email not configured, alert for event '%s' not sent",
            alert.event_name,
        )
        return EmailResult(success=True, provider_name=self.name)


def create_email_sender(
    settings: EmailSettings, client: httpx.AsyncClient | None = None
) -> IEmailSender:
    """Pick the sender variant once at startup."""
    if not settings.is_configured:
        logger.warning("RESEND_API_KEY not set - resale alerts are logged, not emailed")
        return UnconfiguredEmailSender()
    return ResendEmailProvider(settings, client=client)


__all__ = [
    "ResendEmailProvider",
    "UnconfiguredEmailSender",
    "build_subject",
    "create_email_sender",
    "format_norwegian_date",
    "render_resale_alert",
]
