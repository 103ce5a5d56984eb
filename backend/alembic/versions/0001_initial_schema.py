"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for the venue booking service:
users, artists, venues, events, event_artists, performances,
bookings, artist_unavailability, notifications.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("ARTIST", "VENUE", "ADMIN", name="userrole")
event_status = sa.Enum(
    "DRAFT", "PENDING_VENUE_APPROVAL", "SEEKING_VENUE", "SEEKING_ARTISTS", "PENDING",
    "PUBLISHED", "CONFIRMED", "CANCELLED", "COMPLETED",
    name="eventstatus",
)
performance_status = sa.Enum("PENDING", "CONFIRMED", "DECLINED", "CANCELLED", "COMPLETED", name="performancestatus")
booking_status = sa.Enum("PENDING", "ACCEPTED", "DECLINED", "CANCELLED", "COMPLETED", name="bookingstatus")
notification_type = sa.Enum(
    "EVENT_REQUEST", "EVENT_REQUEST_APPROVED", "EVENT_REQUEST_DECLINED",
    "PERFORMANCE_APPLICATION", "PERFORMANCE_INVITATION", "PERFORMANCE_APPROVED",
    "PERFORMANCE_DECLINED", "PERFORMANCE_CANCELLED",
    "PERFORMANCE_INVITATION_ACCEPTED", "PERFORMANCE_INVITATION_DECLINED",
    "BOOKING_REQUEST", "BOOKING_ACCEPTED", "BOOKING_DECLINED", "BOOKING_CANCELLED",
    name="notificationtype",
)


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(150), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- artists / venues ---
    op.create_table(
        "artists",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("slug", sa.String(180), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "venues",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("slug", sa.String(180), nullable=False, unique=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(300), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_by", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("venue_id", sa.String(36), sa.ForeignKey("venues.id"), nullable=True),
        sa.Column("external_venue_name", sa.String(255), nullable=True),
        sa.Column("external_venue_address", sa.String(255), nullable=True),
        sa.Column("external_venue_city", sa.String(120), nullable=True),
        sa.Column("external_venue_contact", sa.String(255), nullable=True),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_hours", sa.Float, nullable=True),
        sa.Column("total_budget", sa.Numeric(12, 2), nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("status", event_status, nullable=False, server_default="DRAFT"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- event_artists ---
    op.create_table(
        "event_artists",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("artist_id", sa.String(36), sa.ForeignKey("artists.id"), nullable=False),
        sa.Column("fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("hours", sa.Float, nullable=True),
        sa.Column("confirmed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "artist_id", name="uq_event_artist"),
    )

    # --- performances ---
    op.create_table(
        "performances",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("artist_id", sa.String(36), sa.ForeignKey("artists.id"), nullable=False),
        sa.Column("status", performance_status, nullable=False, server_default="PENDING"),
        sa.Column("proposed_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("agreed_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("hours", sa.Float, nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("venue_notes", sa.Text, nullable=True),
        sa.Column("artist_notes", sa.Text, nullable=True),
        sa.Column("invited_by", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "artist_id", name="uq_performance_event_artist"),
    )

    # --- bookings ---
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("artist_id", sa.String(36), sa.ForeignKey("artists.id"), nullable=False),
        sa.Column("venue_id", sa.String(36), sa.ForeignKey("venues.id"), nullable=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=True),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("hours", sa.Float, nullable=True),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column("status", booking_status, nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_bookings_artist_status_date", "bookings", ["artist_id", "status", "event_date"])

    # --- artist_unavailability ---
    op.create_table(
        "artist_unavailability",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("artist_id", sa.String(36), sa.ForeignKey("artists.id"), nullable=False),
        sa.Column("start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_artist_unavailability_artist_id", "artist_unavailability", ["artist_id"])

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=True),
        sa.Column("performance_id", sa.String(36), sa.ForeignKey("performances.id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("action_url", sa.String(500), nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_artist_unavailability_artist_id", table_name="artist_unavailability")
    op.drop_table("artist_unavailability")
    op.drop_index("ix_bookings_artist_status_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("performances")
    op.drop_table("event_artists")
    op.drop_table("events")
    op.drop_table("venues")
    op.drop_table("artists")
    op.drop_table("users")
    for enum_type in (notification_type, booking_status, performance_status, event_status, user_role):
        enum_type.drop(op.get_bind(), checkfirst=True)
