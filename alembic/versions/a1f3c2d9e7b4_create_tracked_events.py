"""create tracked_events table

Revision ID: a1f3c2d9e7b4
Revises:
Create Date: 2026-01-12 10:00:00.000000

Hey future me - one row per "email me when resale tickets show up" request.

KEY DESIGN DECISIONS:
1. notified_at NULL = pending. The sweep sets it once the email went out.
2. Partial unique index on (event_id, email) WHERE notified_at IS NULL: at most
   one PENDING row per pair. After a notification the same pair may track again.
   Both SQLite and PostgreSQL support partial indexes.
3. id is a UUID string so rows look the same on both backends.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a1f3c2d9e7b4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create tracked_events (idempotent - skips if it exists)."""
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    if "tracked_events" in inspector.get_table_names():
        return

    op.create_table(
        "tracked_events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(64), nullable=False),
        sa.Column("event_name", sa.String(512), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notified_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "uq_tracked_events_pending_event_email",
        "tracked_events",
        ["event_id", "email"],
        unique=True,
        sqlite_where=sa.text("notified_at IS NULL"),
        postgresql_where=sa.text("notified_at IS NULL"),
    )
    op.create_index(
        "ix_tracked_events_notified_at", "tracked_events", ["notified_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_tracked_events_notified_at", table_name="tracked_events")
    op.drop_index("uq_tracked_events_pending_event_email", table_name="tracked_events")
    op.drop_table("tracked_events")
