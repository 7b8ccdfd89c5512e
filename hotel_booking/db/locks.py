"""
Per-room serialization of capacity checks.

`lock_room_inventory` must be called inside the transaction that reads the
booked units and writes the booking; the lock is released on commit or
rollback, closing the check-then-act window between concurrent requests.
"""

from __future__ import annotations

from sqlalchemy import select, text
from sqlalchemy.engine import Connection

from hotel_booking.config import ROOM_LOCK_NAMESPACE
from hotel_booking.models.rooms import Room


def lock_room_inventory(conn: Connection, room_id: int) -> None:
    """
    Serialize capacity changes for one room within the current transaction.

    PostgreSQL takes a transaction-scoped advisory lock keyed by
    (ROOM_LOCK_NAMESPACE, room_id). Other backends lock the room row with
    SELECT ... FOR UPDATE (SQLite ignores it and relies on its single writer).

    Args:
        conn: Connection with an open transaction
        room_id: Room whose inventory is about to be checked and written
    """
    if conn.dialect.name == "postgresql":
        conn.execute(
            text("SELECT pg_advisory_xact_lock(:namespace, :room_id)"),
            {"namespace": ROOM_LOCK_NAMESPACE, "room_id": room_id},
        )
        return

    conn.execute(select(Room.room_id).where(Room.room_id == room_id).with_for_update())
