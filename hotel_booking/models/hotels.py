"""SQLAlchemy model for hotels."""

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from hotel_booking.models.base import Base


class Hotel(Base):
    """
    ORM model for a hotel (branch).

    Rooms, bookings and branch-admin assignments all reference hotel_id.
    """

    __tablename__ = "hotels"

    hotel_id = Column(Integer, primary_key=True, autoincrement=True)
    hotel_name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    city = Column(String, nullable=False, index=True)
    country = Column(String, nullable=False)
    price_range = Column(String, nullable=True)
    star_rating = Column(Integer, nullable=True)  # 1-5
    amenities = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
