"""Read queries over bookings, including the capacity sum used by the ledger."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.engine import Connection
from sqlalchemy.sql.elements import ColumnElement

from hotel_booking.booking.date_range import DateRange, overlap_clause
from hotel_booking.booking.lifecycle import ACTIVE_STATUSES
from hotel_booking.models.bookings import Booking
from hotel_booking.models.hotels import Hotel
from hotel_booking.models.rooms import Room
from hotel_booking.models.users import User


def get_booking(
    conn: Connection, booking_id: int, for_update: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch the raw bookings row.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (int): Booking to fetch.
        for_update (bool): Lock the row until the surrounding transaction ends.

    Returns:
        Optional[dict[str, Any]]: Column mapping, or None if absent.
    """
    stmt = select(Booking.__table__).where(Booking.booking_id == booking_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def _detail_select() -> Select[Any]:
    """Booking columns joined with the guest, hotel and room they refer to."""
    return (
        select(
            Booking.__table__,
            User.name.label("user_name"),
            User.email.label("user_email"),
            User.phone_number.label("user_phone"),
            Hotel.hotel_name,
            Hotel.address,
            Hotel.city,
            Hotel.country,
            Hotel.star_rating,
            Room.room_type,
            Room.price_per_night,
            Room.availability_status,
        )
        .select_from(Booking)
        .join(User, User.user_id == Booking.user_id)
        .join(Hotel, Hotel.hotel_id == Booking.hotel_id)
        .join(Room, Room.room_id == Booking.room_id)
    )


def get_booking_detail(conn: Connection, booking_id: int) -> Optional[dict[str, Any]]:
    """Fetch a booking with guest, hotel and room fields for display."""
    stmt = _detail_select().where(Booking.booking_id == booking_id)
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_booking_details(
    conn: Connection,
    criteria: Sequence[ColumnElement[bool]],
    limit: int,
    offset: int,
) -> tuple[list[dict[str, Any]], int]:
    """
    Page through bookings matching every criterion, newest first.

    Args:
        conn: Active connection
        criteria: Predicates over Booking columns, ANDed together
        limit: Page size
        offset: Rows to skip

    Returns:
        tuple: (rows on this page, total matching rows)
    """
    stmt = (
        _detail_select()
        .where(*criteria)
        .order_by(Booking.created_at.desc(), Booking.booking_id.desc())
        .limit(limit)
        .offset(offset)
    )
    rows = [dict(r) for r in conn.execute(stmt).mappings().all()]

    total = conn.execute(
        select(func.count()).select_from(Booking).where(*criteria)
    ).scalar_one()
    return rows, int(total)


def sum_booked_units(
    conn: Connection,
    room_id: int,
    date_range: DateRange,
    excluding_booking_id: Optional[int] = None,
) -> int:
    """
    Sum number_of_rooms of active bookings on room_id that overlap date_range.

    Args:
        conn: Active connection (inside the locking transaction for writes)
        room_id: Room whose units are counted
        date_range: Candidate stay
        excluding_booking_id: Booking to leave out (a booking being modified)

    Returns:
        int: Units already committed for an overlapping stay
    """
    stmt = (
        select(func.coalesce(func.sum(Booking.number_of_rooms), 0))
        .where(Booking.room_id == room_id)
        .where(Booking.status.in_([s.value for s in ACTIVE_STATUSES]))
        .where(overlap_clause(Booking.check_in_date, Booking.check_out_date, date_range))
    )
    if excluding_booking_id is not None:
        stmt = stmt.where(Booking.booking_id != excluding_booking_id)

    return int(conn.execute(stmt).scalar_one())
