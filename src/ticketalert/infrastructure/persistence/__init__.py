"""Persistence layer."""

from ticketalert.infrastructure.persistence.database import Database
from ticketalert.infrastructure.persistence.models import Base, TrackedEventModel
from ticketalert.infrastructure.persistence.repositories import (
    TrackedSubscriptionRepository,
)
from ticketalert.infrastructure.persistence.subscription_store import (
    DatabaseSubscriptionStore,
    UnconfiguredSubscriptionStore,
    create_subscription_store,
)

__all__ = [
    "Base",
    "Database",
    "DatabaseSubscriptionStore",
    "TrackedEventModel",
    "TrackedSubscriptionRepository",
    "UnconfiguredSubscriptionStore",
    "create_subscription_store",
]
