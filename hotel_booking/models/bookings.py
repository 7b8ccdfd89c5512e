"""SQLAlchemy model for bookings."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.sql import func

from hotel_booking.models.base import Base


class Booking(Base):
    """
    ORM model for a customer's booking of one or more units of a room.

    The stay is the half-open interval [check_in_date, check_out_date).
    total_price is derived from the room rate and always recomputed
    server-side.
    """

    __tablename__ = "bookings"

    booking_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    hotel_id = Column(
        Integer, ForeignKey("hotels.hotel_id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_id = Column(Integer, ForeignKey("rooms.room_id", ondelete="CASCADE"), nullable=False)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    number_of_guests = Column(Integer, nullable=False, default=1)
    number_of_rooms = Column(Integer, nullable=False, default=1)
    status = Column(String, nullable=False, default="pending")
    payment_status = Column(String, nullable=False, default="pending")
    total_price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        # Capacity lookups filter on room, status and the date window
        Index("idx_bookings_room_status_dates", room_id, status, check_in_date, check_out_date),
        CheckConstraint("check_out_date > check_in_date", name="ck_bookings_dates_ordered"),
    )
