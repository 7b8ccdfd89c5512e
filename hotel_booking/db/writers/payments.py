from decimal import Decimal
from typing import Optional

from sqlalchemy import insert
from sqlalchemy.engine import Connection

from hotel_booking.models.payments import Payment
from hotel_booking.utils.datetime import utc_now


def insert_payment(
    conn: Connection,
    booking_id: int,
    amount: Decimal,
    status: str,
    gateway: str,
    transaction_reference: Optional[str] = None,
) -> int:
    """
    Record one capture or refund outcome reported by the payment gateway.

    Args:
        conn (Connection): Connection with an open transaction.
        booking_id (int): Booking the payment belongs to.
        amount (Decimal): Amount reported by the gateway.
        status (str): paid, failed or refunded.
        gateway (str): Gateway name (e.g. "paypal").
        transaction_reference (Optional[str]): Gateway-side transaction id.

    Returns:
        int: payment_id of the new row.
    """
    result = conn.execute(
        insert(Payment).values(
            booking_id=booking_id,
            amount=amount,
            status=status,
            payment_gateway=gateway,
            transaction_reference=transaction_reference,
            created_at=utc_now(),
        )
    )
    return int(result.inserted_primary_key[0])
