from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from hotel_booking.models.hotels import Hotel


def get_hotel(conn: Connection, hotel_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch a hotel by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        hotel_id (int): Hotel ID.

    Returns:
        Optional[dict[str, Any]]: Hotel columns, or None if not found.
    """
    row = (
        conn.execute(select(Hotel.__table__).where(Hotel.hotel_id == hotel_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_hotel_name(conn: Connection, hotel_id: int) -> str:
    """Hotel name for notification text, "Hotel" when the row is gone."""
    name = conn.execute(select(Hotel.hotel_name).where(Hotel.hotel_id == hotel_id)).scalar()
    return name or "Hotel"
