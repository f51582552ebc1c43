"""ISubscriptionStore implementations and the startup factory."""

import logging

from ticketalert.config.settings import DatabaseSettings
from ticketalert.domain.entities import TrackedSubscription
from ticketalert.domain.ports import ISubscriptionStore
from ticketalert.infrastructure.persistence.database import Database
from ticketalert.infrastructure.persistence.repositories import (
    TrackedSubscriptionRepository,
)

logger = logging.getLogger(__name__)


class DatabaseSubscriptionStore(ISubscriptionStore):
    """Subscriptions persisted in tracked_events. One transaction per call."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @property
    def is_configured(self) -> bool:
        return True

    async def create(
        self, event_id: str, event_name: str, email: str
    ) -> TrackedSubscription | None:
        async with self.database.session_scope() as session:
            subscription = await TrackedSubscriptionRepository(session).add(
                event_id, event_name, email
            )
        logger.info(
            "[TRACKING] Subscription %s created for event %s",
            subscription.id,
            event_id,
        )
        return subscription

    async def list_pending(self) -> list[TrackedSubscription]:
        async with self.database.session_scope() as session:
            return await TrackedSubscriptionRepository(session).list_pending()

    async def mark_notified(self, subscription_id: str) -> None:
        async with self.database.session_scope() as session:
            updated = await TrackedSubscriptionRepository(session).mark_notified(
                subscription_id
            )
        if not updated:
            logger.debug(
                "[TRACKING] Subscription %s already notified or missing", subscription_id
            )


# Yo, demo mode! No DATABASE_URL means the UI still works end to end: tracking "succeeds",
# the sweep finds nothing to do. Nothing here raises.
class UnconfiguredSubscriptionStore(ISubscriptionStore):
    """Store used when no database is configured. Persists nothing."""

    @property
    def is_configured(self) -> bool:
        return False

    async def create(
        self, event_id: str, event_name: str, email: str
    ) -> TrackedSubscription | None:
        logger.info(
            "[TRACKING] Database not configured, subscription for event %s not stored",
            event_id,
        )
        return None

    async def list_pending(self) -> list[TrackedSubscription]:
        return []

    async def mark_notified(self, subscription_id: str) -> None:
        return None


def create_subscription_store(
    settings: DatabaseSettings, database: Database | None = None
) -> ISubscriptionStore:
    """Pick the store variant once at startup."""
    if database is None and not settings.is_configured:
        logger.warning(
            "DATABASE_URL not set - running in demo mode, subscriptions are not stored"
        )
        return UnconfiguredSubscriptionStore()
    return DatabaseSubscriptionStore(database or Database(settings))


__all__ = [
    "DatabaseSubscriptionStore",
    "UnconfiguredSubscriptionStore",
    "create_subscription_store",
]
