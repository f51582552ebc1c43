"""Subscription store port.

Two implementations, chosen ONCE at startup (see create_subscription_store):

- DatabaseSubscriptionStore: SQL table tracked_events
- UnconfiguredSubscriptionStore: no database configured. create() succeeds
  without persisting, list_pending() is always empty, mark_notified() is a no-op.

Callers never branch on "is the database configured"; they just use the port.
"""

from abc import ABC, abstractmethod

from ticketalert.domain.entities import TrackedSubscription


class ISubscriptionStore(ABC):
    """Persistence for resale alert subscriptions."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True if subscriptions are actually persisted."""
        pass

    @abstractmethod
    async def create(
        self, event_id: str, event_name: str, email: str
    ) -> TrackedSubscription | None:
        """Register a pending subscription.

        Returns:
            The stored subscription, or None when nothing is persisted

        Raises:
            DuplicateSubscriptionError: A pending row for (event_id, email) exists
        """
        pass

    @abstractmethod
    async def list_pending(self) -> list[TrackedSubscription]:
        """All subscriptions with notified_at unset, oldest first."""
        pass

    @abstractmethod
    async def mark_notified(self, subscription_id: str) -> None:
        """Set notified_at to now. No effect if already set or unknown."""
        pass


__all__ = ["ISubscriptionStore"]
