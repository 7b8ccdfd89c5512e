"""
Half-open stay interval [check_in, check_out) over calendar dates.

`intervals_overlap` and `overlap_clause` are the single definition of a
booking conflict: the first for Python values, the second for SQL filters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

from sqlalchemy import and_
from sqlalchemy.sql.elements import ColumnElement

from hotel_booking.config import BOOKING_HORIZON_DAYS
from hotel_booking.errors import ValidationError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def intervals_overlap(a_start: Any, a_end: Any, b_start: Any, b_end: Any) -> bool:
    """
    Return True if [a_start, a_end) and [b_start, b_end) share at least one point.

    Intervals that only touch at a boundary (one ends the day the other
    starts) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def overlap_clause(
    start_column: Any, end_column: Any, date_range: "DateRange"
) -> ColumnElement[bool]:
    """SQL form of `intervals_overlap` for a stored [start, end) pair of columns."""
    return and_(start_column < date_range.check_out, date_range.check_in < end_column)


def parse_date(value: Any, field_name: str) -> date:
    """
    Parse a YYYY-MM-DD string (or pass through a date) into a `date`.

    Raises:
        ValidationError: If the value is missing, not in YYYY-MM-DD format,
            or not a real calendar date.
    """
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ValidationError(f"{field_name} must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date") from None


@dataclass(frozen=True)
class DateRange:
    """A stay from check_in (inclusive) to check_out (exclusive)."""

    check_in: date
    check_out: date

    def __post_init__(self) -> None:
        if self.check_out <= self.check_in:
            raise ValidationError("Check-out date must be after check-in date")

    @classmethod
    def parse(
        cls,
        check_in: Any,
        check_out: Any,
        *,
        today: date,
        allow_past: bool = False,
        horizon_days: Optional[int] = BOOKING_HORIZON_DAYS,
    ) -> DateRange:
        """
        Build a validated range from request values.

        Args:
            check_in: Check-in as YYYY-MM-DD string or date
            check_out: Check-out as YYYY-MM-DD string or date
            today: Reference date for the past/horizon checks
            allow_past: Skip the "not in the past" check (recomputing stored stays)
            horizon_days: Furthest allowed check-in, in days from today; None disables

        Raises:
            ValidationError: On any malformed or out-of-range date
        """
        check_in_date = parse_date(check_in, "Check-in date")
        check_out_date = parse_date(check_out, "Check-out date")

        if not allow_past and check_in_date < today:
            raise ValidationError("Check-in date cannot be in the past")

        if horizon_days is not None and check_in_date > today + timedelta(days=horizon_days):
            raise ValidationError(
                f"Check-in date cannot be more than {horizon_days} days in advance"
            )

        return cls(check_in_date, check_out_date)

    def nights(self) -> int:
        """Number of nights charged for the stay (never less than one)."""
        return max(1, (self.check_out - self.check_in).days)

    def overlaps(self, other: DateRange) -> bool:
        return intervals_overlap(self.check_in, self.check_out, other.check_in, other.check_out)

    def to_dict(self) -> dict[str, str]:
        return {
            "check_in_date": self.check_in.isoformat(),
            "check_out_date": self.check_out.isoformat(),
        }
