"""Create hotel, room, user, booking, notification and payment tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-07-20 10:12:03.114502

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f1c2a9d7b10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "hotels",
        sa.Column("hotel_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("hotel_name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("country", sa.String(), nullable=False),
        sa.Column("price_range", sa.String(), nullable=True),
        sa.Column("star_rating", sa.Integer(), nullable=True),
        sa.Column("amenities", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_hotels_city", "hotels", ["city"])

    op.create_table(
        "rooms",
        sa.Column("room_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "hotel_id",
            sa.Integer(),
            sa.ForeignKey("hotels.hotel_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("room_type", sa.String(), nullable=False),
        sa.Column("price_per_night", sa.Numeric(10, 2), nullable=False),
        sa.Column("availability_status", sa.String(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("price_per_night >= 0", name="ck_rooms_price_non_negative"),
    )
    op.create_index("ix_rooms_hotel_id", "rooms", ["hotel_id"])

    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("phone_number", sa.String(), nullable=True, unique=True),
        sa.Column("role", sa.String(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_hotel_assignments",
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "hotel_id",
            sa.Integer(),
            sa.ForeignKey("hotels.hotel_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )

    op.create_table(
        "bookings",
        sa.Column("booking_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "hotel_id",
            sa.Integer(),
            sa.ForeignKey("hotels.hotel_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "room_id",
            sa.Integer(),
            sa.ForeignKey("rooms.room_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("number_of_rooms", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("payment_status", sa.String(), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("check_out_date > check_in_date", name="ck_bookings_dates_ordered"),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_hotel_id", "bookings", ["hotel_id"])
    op.create_index(
        "idx_bookings_room_status_dates",
        "bookings",
        ["room_id", "status", "check_in_date", "check_out_date"],
    )

    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.Column("related_booking_id", sa.Integer(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "payments",
        sa.Column("payment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.booking_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_gateway", sa.String(), nullable=False),
        sa.Column("transaction_reference", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_payments_booking_id", "payments", ["booking_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("payments")
    op.drop_table("notifications")
    op.drop_table("bookings")
    op.drop_table("user_hotel_assignments")
    op.drop_table("users")
    op.drop_table("rooms")
    op.drop_table("hotels")
