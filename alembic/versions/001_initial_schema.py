# alembic/versions/001_initial_schema.py
"""Initial schema - businesses, providers, schedules, bookings, payments

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates every table of the booking engine in its final form. Instants are
stored as timezone-aware timestamps (UTC); recurring schedule windows are
local wall-clock times keyed by weekday, 0 being Monday.
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ulid_pk() -> sa.Column:
    return sa.Column("id", sa.String(length=26), primary_key=True)


def upgrade() -> None:
    """Create the booking engine tables."""
    print("Creating businesses table...")
    op.create_table(
        "businesses",
        _ulid_pk(),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED', 'SUSPENDED')",
            name="ck_businesses_status",
        ),
    )
    op.create_index("ix_businesses_owner_id", "businesses", ["owner_id"])
    op.create_index("ix_businesses_status", "businesses", ["status"])

    op.create_table(
        "business_hours",
        _ulid_pk(),
        sa.Column(
            "business_id",
            sa.String(length=26),
            sa.ForeignKey("businesses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_business_hours_weekday"),
        sa.CheckConstraint("end_time > start_time", name="ck_business_hours_order"),
    )
    op.create_index(
        "idx_business_hours_business_weekday", "business_hours", ["business_id", "weekday"]
    )

    print("Creating providers and services tables...")
    op.create_table(
        "providers",
        _ulid_pk(),
        sa.Column("business_id", sa.String(length=26), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=120), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_providers_business_id", "providers", ["business_id"])

    op.create_table(
        "services",
        _ulid_pk(),
        sa.Column("business_id", sa.String(length=26), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.CheckConstraint("duration_minutes >= 0", name="ck_services_duration"),
        sa.CheckConstraint("price >= 0", name="ck_services_price"),
    )
    op.create_index("ix_services_business_id", "services", ["business_id"])

    op.create_table(
        "provider_services",
        sa.Column(
            "provider_id",
            sa.String(length=26),
            sa.ForeignKey("providers.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "service_id",
            sa.String(length=26),
            sa.ForeignKey("services.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    print("Creating availability tables...")
    op.create_table(
        "availability_windows",
        _ulid_pk(),
        sa.Column(
            "provider_id",
            sa.String(length=26),
            sa.ForeignKey("providers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("slot_interval_minutes", sa.Integer(), nullable=True),
        sa.CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_availability_weekday"),
        sa.CheckConstraint("end_time > start_time", name="ck_availability_order"),
        sa.CheckConstraint(
            "slot_interval_minutes IS NULL OR slot_interval_minutes > 0",
            name="ck_availability_slot_interval",
        ),
    )
    op.create_index(
        "idx_availability_provider_weekday",
        "availability_windows",
        ["provider_id", "weekday", "start_time"],
    )

    op.create_table(
        "unavailability_windows",
        _ulid_pk(),
        sa.Column(
            "provider_id",
            sa.String(length=26),
            sa.ForeignKey("providers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_unavailability_weekday"),
        sa.CheckConstraint("end_time > start_time", name="ck_unavailability_order"),
    )
    op.create_index(
        "idx_unavailability_provider_weekday",
        "unavailability_windows",
        ["provider_id", "weekday", "start_time"],
    )

    print("Creating bookings table...")
    op.create_table(
        "bookings",
        _ulid_pk(),
        sa.Column("business_id", sa.String(length=26), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("customer_id", sa.String(length=64), nullable=False),
        sa.Column("scheduled_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("scheduled_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("canceled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("canceled_by_id", sa.String(length=64), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "rescheduled_from_id", sa.String(length=26), sa.ForeignKey("bookings.id"), nullable=True
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'SCHEDULED', 'CANCELED', 'COMPLETED')",
            name="ck_bookings_status",
        ),
        sa.CheckConstraint("scheduled_end > scheduled_start", name="ck_bookings_interval"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_customer_id", "bookings", ["customer_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("idx_bookings_business_start", "bookings", ["business_id", "scheduled_start"])
    op.create_index("idx_bookings_status_start", "bookings", ["status", "scheduled_start"])

    op.create_table(
        "booking_line_items",
        _ulid_pk(),
        sa.Column(
            "booking_id",
            sa.String(length=26),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider_id", sa.String(length=26), sa.ForeignKey("providers.id"), nullable=False),
        sa.Column("service_id", sa.String(length=26), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.CheckConstraint("duration_minutes >= 0", name="ck_line_items_duration"),
        sa.CheckConstraint("price >= 0", name="ck_line_items_price"),
    )
    op.create_index("ix_booking_line_items_booking_id", "booking_line_items", ["booking_id"])
    op.create_index("ix_booking_line_items_provider_id", "booking_line_items", ["provider_id"])

    print("Creating payments table...")
    op.create_table(
        "payments",
        _ulid_pk(),
        sa.Column("booking_id", sa.String(length=26), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('PENDING', 'SUCCEEDED', 'REFUNDED')", name="ck_payments_status"
        ),
        sa.CheckConstraint("amount >= 0", name="ck_payments_amount"),
    )
    op.create_index("idx_payments_booking_status", "payments", ["booking_id", "status"])

    print("Booking engine schema created")


def downgrade() -> None:
    """Drop the booking engine tables; their indexes go with them."""
    print("Dropping booking engine tables...")
    for table in (
        "payments",
        "booking_line_items",
        "bookings",
        "unavailability_windows",
        "availability_windows",
        "provider_services",
        "services",
        "providers",
        "business_hours",
        "businesses",
    ):
        op.drop_table(table)
