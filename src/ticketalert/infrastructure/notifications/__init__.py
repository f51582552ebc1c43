"""Notification delivery (email)."""

from ticketalert.infrastructure.notifications.email_provider import (
    ResendEmailProvider,
    UnconfiguredEmailSender,
    create_email_sender,
)

__all__ = ["ResendEmailProvider", "UnconfiguredEmailSender", "create_email_sender"]
