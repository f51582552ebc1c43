"""SQLAlchemy ORM models for TicketAlert."""

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me - SQLite doesn't preserve timezone info! Datetimes come back naive even though
# we always write UTC. Run every datetime read from the DB through this before comparing it
# with datetime.now(UTC), or you get "can't compare offset-naive and offset-aware".
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


PENDING_ONLY = sa.text("notified_at IS NULL")
PENDING_PAIR_INDEX = "uq_tracked_events_pending_event_email"


# Listen up, the partial unique index is THE duplicate guard: at most one PENDING row per
# (event_id, email). Once notified_at is set the row drops out of the index, so the same person
# can track the same event again after being notified. Both SQLite and PostgreSQL support
# partial indexes; the dialect-specific *_where kwargs make create_all emit the WHERE clause.
class TrackedEventModel(Base):
    """A resale alert subscription."""

    __tablename__ = "tracked_events"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    event_id: Mapped[str] = mapped_column(String(64), nullable=False)
    event_name: Mapped[str] = mapped_column(String(512), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    notified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    __table_args__ = (
        Index(
            PENDING_PAIR_INDEX,
            "event_id",
            "email",
            unique=True,
            sqlite_where=PENDING_ONLY,
            postgresql_where=PENDING_ONLY,
        ),
        Index("ix_tracked_events_notified_at", "notified_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<TrackedEventModel id={self.id} event_id={self.event_id} "
            f"pending={self.notified_at is None}>"
        )


__all__ = ["PENDING_PAIR_INDEX", "Base", "TrackedEventModel", "ensure_utc_aware", "utc_now"]
