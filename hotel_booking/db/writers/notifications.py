from typing import Optional

from sqlalchemy import insert
from sqlalchemy.engine import Connection

from hotel_booking.models.notifications import Notification
from hotel_booking.utils.datetime import utc_now


def insert_notification(
    conn: Connection,
    user_id: int,
    kind: str,
    title: str,
    message: str,
    related_booking_id: Optional[int] = None,
) -> int:
    """
    Store an unread in-app notification.

    Returns:
        int: notification_id of the new row
    """
    result = conn.execute(
        insert(Notification).values(
            user_id=user_id,
            type=kind,
            title=title,
            message=message,
            is_read=False,
            related_booking_id=related_booking_id,
            created_at=utc_now(),
        )
    )
    return int(result.inserted_primary_key[0])
