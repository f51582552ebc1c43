"""Repository implementations for domain entities."""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketalert.domain.entities import TrackedSubscription
from ticketalert.domain.exceptions import DuplicateSubscriptionError

from .models import PENDING_PAIR_INDEX, TrackedEventModel, ensure_utc_aware, utc_now

logger = logging.getLogger(__name__)

# SQLite names the columns instead of the index.
_SQLITE_PENDING_PAIR_MESSAGE = (
    "UNIQUE constraint failed: tracked_events.event_id, tracked_events.email"
)


def is_pending_pair_conflict(error: IntegrityError) -> bool:
    """True only for a violation of the pending (event_id, email) unique index."""
    message = str(error.orig)
    return PENDING_PAIR_INDEX in message or _SQLITE_PENDING_PAIR_MESSAGE in message


def _to_entity(model: TrackedEventModel) -> TrackedSubscription:
    return TrackedSubscription(
        id=model.id,
        event_id=model.event_id,
        event_name=model.event_name,
        email=model.email,
        created_at=ensure_utc_aware(model.created_at),
        notified_at=ensure_utc_aware(model.notified_at) if model.notified_at else None,
    )


class TrackedSubscriptionRepository:
    """Queries against tracked_events within one session/transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # Hey future me, we DON'T check-then-insert here. Two concurrent requests would both pass
    # the check. The partial unique index decides, and only ITS IntegrityError is translated.
    # NOT NULL or primary key failures propagate unchanged.
    # After a failed flush the session's transaction is dead - the caller's session_scope
    # rolls it back when the DuplicateSubscriptionError propagates.
    async def add(self, event_id: str, event_name: str, email: str) -> TrackedSubscription:
        """Insert a pending subscription.

        Raises:
            DuplicateSubscriptionError: A pending row for (event_id, email) exists
        """
        model = TrackedEventModel(
            event_id=event_id,
            event_name=event_name,
            email=email,
            created_at=utc_now(),
        )
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if not is_pending_pair_conflict(e):
                raise
            raise DuplicateSubscriptionError(event_id, email) from e
        return _to_entity(model)

    async def list_pending(self) -> list[TrackedSubscription]:
        stmt = (
            select(TrackedEventModel)
            .where(TrackedEventModel.notified_at.is_(None))
            .order_by(TrackedEventModel.created_at, TrackedEventModel.id)
        )
        result = await self.session.execute(stmt)
        return [_to_entity(model) for model in result.scalars().all()]

    async def mark_notified(self, subscription_id: str) -> bool:
        """Set notified_at once. Returns False if already notified or unknown."""
        stmt = (
            update(TrackedEventModel)
            .where(
                TrackedEventModel.id == subscription_id,
                TrackedEventModel.notified_at.is_(None),
            )
            .values(notified_at=utc_now())
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)


__all__ = ["TrackedSubscriptionRepository", "is_pending_pair_conflict"]
