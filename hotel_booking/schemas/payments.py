from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PaymentEventPayload(BaseModel):
    """
    Outcome of a capture or refund reported by the payment gateway.
    """

    booking_id: int = Field(..., description="Booking the payment belongs to")
    succeeded: bool = Field(..., description="Whether the gateway completed the operation")
    amount: Optional[Decimal] = Field(
        None, description="Amount processed; defaults to the booking total"
    )
    transaction_reference: Optional[str] = Field(None, description="Gateway transaction id")
    gateway: str = Field("paypal", description="Payment gateway name")
