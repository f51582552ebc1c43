"""Email sender port.

Hey future me - this is the PORT the notification sweep and the test-email
endpoint talk to. Implementations live in infrastructure/notifications:

- ResendEmailProvider      -> real delivery through the Resend REST API
- UnconfiguredEmailSender  -> demo mode, reports success without sending

Contract: send_resale_alert() NEVER raises. Every failure comes back as
EmailResult(success=False, error=...), so one bad address can't abort a sweep.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ticketalert.domain.entities import ResaleAlert


@dataclass(frozen=True)
class EmailResult:
    """Result of sending one email."""

    success: bool
    provider_name: str
    error: str | None = None
    external_id: str | None = None  # Message ID from the provider


class IEmailSender(ABC):
    """Interface for transactional email delivery."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logs and health output."""
        pass

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True if the sender actually delivers mail."""
        pass

    @abstractmethod
    async def send_resale_alert(self, alert: ResaleAlert) -> EmailResult:
        """Send a resale-available notification.

        Args:
            alert: Recipient and event details

        Returns:
            EmailResult indicating success/failure
        """
        pass

    async def close(self) -> None:  # noqa: B027 - optional hook
        """Release network resources. Default: nothing to release."""


__all__ = ["EmailResult", "IEmailSender"]
