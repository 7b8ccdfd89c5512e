"""
Room capacity accounting.

A room row stands for a pool of identical units. Bookings in an active status
(pending, confirmed) hold `number_of_rooms` units for every night of their
stay; cancelled and completed bookings hold nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import structlog
from sqlalchemy.engine import Connection

from hotel_booking.booking.date_range import DateRange
from hotel_booking.config import DEFAULT_ROOM_CAPACITY
from hotel_booking.db.readers.bookings import sum_booked_units
from hotel_booking.errors import CapacityExceededError
from hotel_booking.metrics import capacity_rejections

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CapacityCheck:
    ok: bool
    available: int
    booked: int
    capacity: int


def evaluate_capacity(booked: int, requested: int, capacity: int) -> CapacityCheck:
    """
    Decide whether `requested` more units fit next to `booked` ones.

    Example:
        >>> evaluate_capacity(booked=8, requested=3, capacity=10)
        CapacityCheck(ok=False, available=2, booked=8, capacity=10)
    """
    return CapacityCheck(
        ok=booked + requested <= capacity,
        available=max(capacity - booked, 0),
        booked=booked,
        capacity=capacity,
    )


class CapacityLedger:
    """Answers "how many units of this room are taken for these nights"."""

    def __init__(self, default_capacity: int = DEFAULT_ROOM_CAPACITY) -> None:
        self.default_capacity = default_capacity

    def capacity_for(self, room: Optional[Mapping[str, Any]]) -> int:
        """Per-room override when set, otherwise the configured default."""
        if room is not None and room.get("capacity") is not None:
            return int(room["capacity"])
        return self.default_capacity

    def booked_units(
        self,
        conn: Connection,
        room_id: int,
        date_range: DateRange,
        excluding_booking_id: Optional[int] = None,
    ) -> int:
        return sum_booked_units(conn, room_id, date_range, excluding_booking_id)

    def has_capacity(
        self,
        conn: Connection,
        room_id: int,
        date_range: DateRange,
        requested_units: int,
        excluding_booking_id: Optional[int] = None,
        capacity: Optional[int] = None,
    ) -> CapacityCheck:
        booked = self.booked_units(conn, room_id, date_range, excluding_booking_id)
        limit = self.default_capacity if capacity is None else capacity
        return evaluate_capacity(booked, requested_units, limit)

    def ensure_capacity(
        self,
        conn: Connection,
        room_id: int,
        date_range: DateRange,
        requested_units: int,
        excluding_booking_id: Optional[int] = None,
        capacity: Optional[int] = None,
    ) -> CapacityCheck:
        """
        Raise unless the requested units fit.

        Must run inside the transaction holding the room lock
        (`hotel_booking.db.locks.lock_room_inventory`) so the answer stays true
        until the booking is written.

        Raises:
            CapacityExceededError: With the available and requested counts
        """
        check = self.has_capacity(
            conn, room_id, date_range, requested_units, excluding_booking_id, capacity
        )
        if not check.ok:
            capacity_rejections.inc()
            logger.info(
                "booking_capacity_rejected",
                room_id=room_id,
                check_in=date_range.check_in.isoformat(),
                check_out=date_range.check_out.isoformat(),
                booked=check.booked,
                requested=requested_units,
                capacity=check.capacity,
            )
            raise CapacityExceededError(available=check.available, requested=requested_units)
        return check
