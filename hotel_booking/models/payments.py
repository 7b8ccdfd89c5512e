"""SQLAlchemy model for payment attempts reported by the payment gateway."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from hotel_booking.models.base import Base


class Payment(Base):
    """One capture or refund outcome for a booking."""

    __tablename__ = "payments"

    payment_id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(10, 2), nullable=False)
    payment_gateway = Column(String, nullable=False)
    transaction_reference = Column(String, nullable=True)
    status = Column(String, nullable=False)  # paid, failed, refunded
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
