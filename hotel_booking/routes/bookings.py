from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query, status

from hotel_booking.booking.access import Principal
from hotel_booking.config import DEFAULT_CURRENCY
from hotel_booking.dependencies import (
    get_booking_service,
    get_current_principal,
    require_admin,
    require_customer,
)
from hotel_booking.errors import BookingError, UpstreamFailure
from hotel_booking.routes._booking_helpers import (
    page_response,
    serialize_booking,
    validate_pagination,
)
from hotel_booking.schemas.bookings import (
    BookingCreatePayload,
    BookingModifyPayload,
    BookingStatusPayload,
)
from hotel_booking.services.bookings import BookingFilters, BookingService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreatePayload,
    principal: Principal = Depends(require_customer),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """
    Create a booking for the authenticated customer.

    The room's remaining capacity is checked and the price computed under a
    per-room lock, so two concurrent requests cannot both take the last units.

    Returns:
        dict: The new booking (status pending, payment pending)
    """
    try:
        booking = service.create_booking(principal, payload)
        return {
            "success": True,
            "message": "Booking created successfully",
            "data": serialize_booking(booking),
            "currency": DEFAULT_CURRENCY,
        }
    except BookingError:
        raise
    except Exception as e:
        logger.exception("booking_creation_failed", error=str(e))
        raise UpstreamFailure("Failed to create booking") from e


@router.get("/bookings/my-bookings")
def list_my_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: Optional[int] = Query(None, description="Page size (max 100)"),
    offset: Optional[int] = Query(None, description="Rows to skip"),
    principal: Principal = Depends(require_customer),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """List the caller's own bookings, newest first."""
    try:
        limit_value, offset_value = validate_pagination(limit, offset)
        page = service.list_my_bookings(principal, status_filter, limit_value, offset_value)
        return page_response(page)
    except BookingError:
        raise
    except Exception as e:
        logger.exception("booking_list_failed", scope="own", error=str(e))
        raise UpstreamFailure("Failed to fetch bookings") from e


@router.get("/bookings")
def list_bookings(
    user_id: Optional[int] = Query(None),
    hotel_id: Optional[int] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_status: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, description="Page size (max 100)"),
    offset: Optional[int] = Query(None, description="Rows to skip"),
    principal: Principal = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """
    List bookings for admins.

    Branch admins are restricted to their assigned hotels automatically; a
    hotel_id outside that set is refused with 403.
    """
    try:
        limit_value, offset_value = validate_pagination(limit, offset)
        filters = BookingFilters(
            user_id=user_id,
            hotel_id=hotel_id,
            status=status_filter,
            payment_status=payment_status,
        )
        page = service.list_bookings(principal, filters, limit_value, offset_value)
        return page_response(page)
    except BookingError:
        raise
    except Exception as e:
        logger.exception("booking_list_failed", scope="admin", error=str(e))
        raise UpstreamFailure("Failed to fetch bookings") from e


@router.get("/bookings/hotel/{hotel_id}")
def list_hotel_bookings(
    hotel_id: int,
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_status: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, description="Page size (max 100)"),
    offset: Optional[int] = Query(None, description="Rows to skip"),
    principal: Principal = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """List all bookings of one hotel (admins with access to that hotel)."""
    try:
        limit_value, offset_value = validate_pagination(limit, offset)
        filters = BookingFilters(status=status_filter, payment_status=payment_status)
        page = service.list_hotel_bookings(
            principal, hotel_id, filters, limit_value, offset_value
        )
        return page_response(page)
    except BookingError:
        raise
    except Exception as e:
        logger.exception("booking_list_failed", scope="hotel", hotel_id=hotel_id, error=str(e))
        raise UpstreamFailure("Failed to fetch hotel bookings") from e


@router.get("/bookings/{booking_id}")
def get_booking(
    booking_id: int,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """Fetch one booking with hotel, room and guest details."""
    try:
        booking = service.get_booking(principal, booking_id)
        return {
            "success": True,
            "data": serialize_booking(booking),
            "currency": DEFAULT_CURRENCY,
        }
    except BookingError:
        raise
    except Exception as e:
        logger.exception("booking_fetch_failed", booking_id=booking_id, error=str(e))
        raise UpstreamFailure("Failed to fetch booking") from e


@router.patch("/bookings/{booking_id}/modify")
def modify_booking(
    booking_id: int,
    payload: BookingModifyPayload,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """
    Change dates, room, guests or quantity of a booking.

    The total price is recomputed when dates, room or quantity change.
    """
    try:
        booking = service.modify_booking(principal, booking_id, payload)
        return {
            "success": True,
            "message": "Booking updated successfully",
            "data": serialize_booking(booking),
            "currency": DEFAULT_CURRENCY,
        }
    except BookingError:
        raise
    except Exception as e:
        logger.exception("booking_modify_failed", booking_id=booking_id, error=str(e))
        raise UpstreamFailure("Failed to modify booking") from e


@router.patch("/bookings/{booking_id}/cancel")
def cancel_booking(
    booking_id: int,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """Cancel a booking (its owner, or an admin with access to its hotel)."""
    try:
        booking = service.cancel_booking(principal, booking_id)
        return {
            "success": True,
            "message": "Booking cancelled successfully",
            "data": serialize_booking(booking),
        }
    except BookingError:
        raise
    except Exception as e:
        logger.exception("booking_cancel_failed", booking_id=booking_id, error=str(e))
        raise UpstreamFailure("Failed to cancel booking") from e


@router.patch("/bookings/{booking_id}/status")
def update_booking_status(
    booking_id: int,
    payload: BookingStatusPayload,
    principal: Principal = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """Update status and/or payment_status (admins with access to the hotel)."""
    try:
        booking = service.update_status(
            principal, booking_id, payload.status, payload.payment_status
        )
        return {
            "success": True,
            "message": "Booking status updated successfully",
            "data": serialize_booking(booking),
        }
    except BookingError:
        raise
    except Exception as e:
        logger.exception("booking_status_update_failed", booking_id=booking_id, error=str(e))
        raise UpstreamFailure("Failed to update booking status") from e
