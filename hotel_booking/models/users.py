"""SQLAlchemy models for users and branch-admin hotel assignments."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from hotel_booking.models.base import Base


class User(Base):
    """
    ORM model for platform users.

    role is one of customer, branch_admin, super_admin or the legacy admin.
    Credentials live with the identity provider; rows are matched by email.
    """

    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    phone_number = Column(String, nullable=True, unique=True)
    role = Column(String, nullable=False, default="customer")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class UserHotelAssignment(Base):
    """Many-to-many link giving a branch admin authority over a hotel."""

    __tablename__ = "user_hotel_assignments"

    user_id = Column(
        Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True
    )
    hotel_id = Column(
        Integer, ForeignKey("hotels.hotel_id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
