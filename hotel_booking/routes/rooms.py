from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from hotel_booking.config import DEFAULT_CURRENCY
from hotel_booking.dependencies import get_booking_service
from hotel_booking.errors import BookingError, UpstreamFailure
from hotel_booking.services.bookings import BookingService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/rooms/{room_id}/availability")
def check_room_availability(
    room_id: int,
    check_in_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    check_out_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    number_of_rooms: Optional[int] = Query(None, description="Units wanted (default 1)"),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """
    Public availability check for a room over a stay.

    Reports how many units are still free for the dates and, when the room
    can be booked, the price the stay would cost.

    Example:
        >>> GET /api/rooms/7/availability?check_in_date=2025-06-03&check_out_date=2025-06-06
        {"success": true, "data": {"available": true, "available_units": 2, ...}}
    """
    try:
        result = service.check_availability(
            room_id, check_in_date, check_out_date, number_of_rooms
        )
        return {"success": True, "data": result, "currency": DEFAULT_CURRENCY}
    except BookingError:
        raise
    except Exception as e:
        logger.exception("availability_check_failed", room_id=room_id, error=str(e))
        raise UpstreamFailure("Failed to check room availability") from e
