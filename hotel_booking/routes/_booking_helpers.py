"""
Internal helper functions for booking route handlers.

Validation of query parameters and conversion of stored rows into JSON
responses, shared by the booking, room and payment routes.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from hotel_booking.booking.pricing import currency_info, format_amount
from hotel_booking.config import DEFAULT_CURRENCY, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from hotel_booking.errors import ValidationError
from hotel_booking.services.bookings import BookingPage

MONEY_FIELDS = ("total_price", "price_per_night")


def validate_pagination(limit: Optional[int], offset: Optional[int]) -> tuple[int, int]:
    """
    Apply pagination defaults and bounds.

    Args:
        limit: Requested page size (default DEFAULT_PAGE_LIMIT)
        offset: Rows to skip (default 0)

    Returns:
        tuple[int, int]: (limit, offset)

    Raises:
        ValidationError: If limit is outside 1..MAX_PAGE_LIMIT or offset is negative
    """
    limit_value = DEFAULT_PAGE_LIMIT if limit is None else limit
    offset_value = 0 if offset is None else offset

    if limit_value > MAX_PAGE_LIMIT:
        raise ValidationError(f"Limit cannot exceed {MAX_PAGE_LIMIT}")
    if limit_value < 1:
        raise ValidationError("Limit must be at least 1")
    if offset_value < 0:
        raise ValidationError("Offset must be 0 or greater")
    return limit_value, offset_value


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format_amount(value)
    return value


def serialize_booking(row: dict[str, Any]) -> dict[str, Any]:
    """
    Render a booking row for a response.

    Money goes out as two-decimal strings with a `<field>_info` currency
    block; dates as YYYY-MM-DD.
    """
    data = {key: _jsonable(value) for key, value in row.items()}
    for money_field in MONEY_FIELDS:
        if row.get(money_field) is not None:
            data[f"{money_field}_info"] = currency_info(row[money_field])
    return data


def page_response(page: BookingPage) -> dict[str, Any]:
    """Envelope for paginated booking lists."""
    body: dict[str, Any] = {
        "success": True,
        "data": [serialize_booking(row) for row in page.items],
        "currency": DEFAULT_CURRENCY,
        "pagination": {
            "total": page.total,
            "limit": page.limit,
            "offset": page.offset,
            "has_more": page.has_more,
        },
    }
    if page.message:
        body["message"] = page.message
    body.update(page.extra)
    return body
