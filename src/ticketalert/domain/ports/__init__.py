"""Domain ports (interfaces implemented by the infrastructure layer)."""

from ticketalert.domain.ports.notification import EmailResult, IEmailSender
from ticketalert.domain.ports.subscription_store import ISubscriptionStore

__all__ = ["EmailResult", "IEmailSender", "ISubscriptionStore"]
