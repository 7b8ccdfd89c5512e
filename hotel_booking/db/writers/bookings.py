from typing import Any

import structlog
from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from hotel_booking.db.readers.bookings import get_booking
from hotel_booking.errors import NotFoundError
from hotel_booking.models.bookings import Booking
from hotel_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_booking(conn: Connection, values: dict[str, Any]) -> dict[str, Any]:
    """
    Insert a booking inside the caller's transaction.

    Args:
        conn (Connection): Connection with an open transaction (holding the room lock).
        values (dict[str, Any]): Column values; total_price must already be computed.

    Returns:
        dict[str, Any]: The stored row, including generated id and timestamps.
    """
    now = utc_now()
    result = conn.execute(insert(Booking).values(**values, created_at=now, updated_at=now))
    booking_id = result.inserted_primary_key[0]

    logger.debug("booking_row_inserted", booking_id=booking_id)
    row = get_booking(conn, booking_id)
    if row is None:
        raise NotFoundError("Booking not found")
    return row


def update_booking(conn: Connection, booking_id: int, changes: dict[str, Any]) -> dict[str, Any]:
    """
    Apply column changes to one booking and return the updated row.

    Args:
        conn (Connection): Connection with an open transaction.
        booking_id (int): Booking to update.
        changes (dict[str, Any]): Columns to set; updated_at is always refreshed.

    Returns:
        dict[str, Any]: The row after the update.
    """
    conn.execute(
        update(Booking)
        .where(Booking.booking_id == booking_id)
        .values(**changes, updated_at=utc_now())
    )

    logger.debug("booking_row_updated", booking_id=booking_id, columns=sorted(changes))
    row = get_booking(conn, booking_id)
    if row is None:
        raise NotFoundError("Booking not found")
    return row
