from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from hotel_booking.booking.access import Principal, build_principal
from hotel_booking.models.users import User, UserHotelAssignment


def get_assigned_hotel_ids(conn: Connection, user_id: int) -> list[int]:
    """
    List hotel ids assigned to a (branch admin) user.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        user_id (int): User ID.

    Returns:
        list[int]: Assigned hotel ids, ascending.
    """
    result = conn.execute(
        select(UserHotelAssignment.hotel_id)
        .where(UserHotelAssignment.user_id == user_id)
        .order_by(UserHotelAssignment.hotel_id)
    )
    return list(result.scalars().all())


def load_principal(conn: Connection, email: str) -> Optional[Principal]:
    """
    Load the user identified by email together with its hotel assignments.

    The assignments are resolved once here and travel on the Principal, so
    access checks never query per request.
    """
    row = conn.execute(select(User.__table__).where(User.email == email)).mappings().fetchone()
    if not row:
        return None
    return build_principal(row, get_assigned_hotel_ids(conn, row["user_id"]))
