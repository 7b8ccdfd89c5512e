"""
Stay pricing in exact decimal arithmetic.

Totals are always derived server-side from the room's stored rate:
nights * price_per_night * number_of_rooms, quantized to cents.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from hotel_booking.booking.date_range import DateRange
from hotel_booking.config import DEFAULT_CURRENCY
from hotel_booking.errors import ValidationError

CENTS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """
    Convert a stored or literal amount to a cent-precision Decimal.

    Floats are routed through `str` so 100.1 becomes Decimal("100.10"), not
    the binary expansion of the float.
    """
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError):
        raise ValidationError(f"Invalid monetary amount: {value!r}") from None


def validate_rate(value: Any) -> Decimal:
    """
    Validate a per-night rate: non-negative with at most two decimal places.

    Raises:
        ValidationError: If the rate is negative, malformed or too precise
    """
    try:
        rate = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValidationError(f"Invalid price per night: {value!r}") from None

    if not rate.is_finite() or rate < 0:
        raise ValidationError("Price per night must be a non-negative amount")
    if rate != rate.quantize(CENTS):
        raise ValidationError("Price per night cannot have more than 2 decimal places")
    return rate.quantize(CENTS)


@dataclass(frozen=True)
class PriceQuote:
    nights: int
    price_per_night: Decimal
    number_of_rooms: int
    total_price: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "nights": self.nights,
            "price_per_night": format_amount(self.price_per_night),
            "number_of_rooms": self.number_of_rooms,
            "total_price": format_amount(self.total_price),
            "total_price_info": currency_info(self.total_price),
        }


def calculate_price(date_range: DateRange, price_per_night: Any, room_count: int) -> PriceQuote:
    """
    Price a stay.

    Args:
        date_range: The stay
        price_per_night: Authoritative room rate (Decimal, str or numeric)
        room_count: Number of identical room units booked

    Returns:
        PriceQuote with nights and the exact total

    Example:
        >>> rng = DateRange(date(2024, 1, 1), date(2024, 1, 3))
        >>> calculate_price(rng, Decimal("100.00"), 2).total_price
        Decimal('400.00')
    """
    if room_count < 1:
        raise ValidationError("number_of_rooms must be at least 1")

    rate = validate_rate(price_per_night)
    nights = date_range.nights()
    total = (rate * nights * room_count).quantize(CENTS, rounding=ROUND_HALF_UP)
    return PriceQuote(
        nights=nights,
        price_per_night=rate,
        number_of_rooms=room_count,
        total_price=total,
    )


def format_amount(amount: Any) -> str:
    """Render an amount as a fixed two-decimal string ("400.00")."""
    return str(to_money(amount))


def format_price(amount: Any, currency: str = DEFAULT_CURRENCY) -> str:
    if currency == "USD":
        return f"${format_amount(amount)}"
    return f"{currency} {format_amount(amount)}"


def currency_info(amount: Any, currency: str = DEFAULT_CURRENCY) -> dict[str, str]:
    """Currency block attached next to every price in responses."""
    return {
        "amount": format_amount(amount),
        "currency": currency,
        "formatted": format_price(amount, currency),
    }
