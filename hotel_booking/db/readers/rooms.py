from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from hotel_booking.models.rooms import Room


def get_room(conn: Connection, room_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch a room by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_id (int): Room ID.

    Returns:
        Optional[dict[str, Any]]: Room columns, or None if not found.
    """
    row = conn.execute(select(Room.__table__).where(Room.room_id == room_id)).mappings().fetchone()
    return dict(row) if row else None
