"""SQLAlchemy model for bookable rooms."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from hotel_booking.models.base import Base


class Room(Base):
    """
    ORM model for a room type offered by a hotel.

    A row stands for a pool of identical units. `capacity` is the number of
    units that can be booked at once; when NULL the configured
    DEFAULT_ROOM_CAPACITY applies.
    """

    __tablename__ = "rooms"

    room_id = Column(Integer, primary_key=True, autoincrement=True)
    hotel_id = Column(
        Integer, ForeignKey("hotels.hotel_id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_type = Column(String, nullable=False)
    price_per_night = Column(Numeric(10, 2), nullable=False)
    availability_status = Column(String, nullable=False, default="available")
    capacity = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("price_per_night >= 0", name="ck_rooms_price_non_negative"),
    )
