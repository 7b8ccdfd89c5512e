"""
Unit tests for DateRange parsing and the overlap rule.
"""

from __future__ import annotations

from datetime import date, timedelta
from itertools import product

import pytest

from hotel_booking.booking.date_range import DateRange, intervals_overlap, parse_date
from hotel_booking.errors import ValidationError

TODAY = date(2025, 1, 15)


def legacy_overlap(a: date, b: date, c: date, d: date) -> bool:
    """The three-clause form the stored queries used to spell out."""
    return (c <= a < d) or (c < b <= d) or (a <= c and b >= d)


def _ranges(days: int = 6) -> list[tuple[date, date]]:
    start = date(2025, 6, 1)
    points = [start + timedelta(days=i) for i in range(days)]
    return [(p, q) for p, q in product(points, points) if p < q]


@pytest.mark.unit
def test_overlap_matches_three_clause_form_on_every_pair() -> None:
    """The single predicate agrees with the legacy OR form for all valid ranges."""
    ranges = _ranges()
    for (a, b), (c, d) in product(ranges, ranges):
        assert intervals_overlap(a, b, c, d) == legacy_overlap(a, b, c, d), (a, b, c, d)


@pytest.mark.unit
def test_overlap_is_symmetric() -> None:
    ranges = _ranges()
    for (a, b), (c, d) in product(ranges, ranges):
        assert intervals_overlap(a, b, c, d) == intervals_overlap(c, d, a, b)


@pytest.mark.unit
def test_adjacent_stays_do_not_overlap() -> None:
    """Check-out day of one stay can be the check-in day of the next."""
    first = DateRange(date(2025, 6, 1), date(2025, 6, 5))
    second = DateRange(date(2025, 6, 5), date(2025, 6, 7))

    assert not first.overlaps(second)
    assert not second.overlaps(first)


@pytest.mark.unit
def test_contained_stay_overlaps() -> None:
    outer = DateRange(date(2025, 6, 1), date(2025, 6, 10))
    inner = DateRange(date(2025, 6, 3), date(2025, 6, 4))

    assert outer.overlaps(inner)
    assert inner.overlaps(outer)


@pytest.mark.unit
@pytest.mark.parametrize(
    "check_in, check_out, nights",
    [
        (date(2025, 6, 1), date(2025, 6, 2), 1),
        (date(2025, 6, 1), date(2025, 6, 3), 2),
        (date(2025, 6, 28), date(2025, 7, 3), 5),
        (date(2024, 2, 28), date(2024, 3, 1), 2),  # leap day
    ],
)
def test_nights(check_in: date, check_out: date, nights: int) -> None:
    assert DateRange(check_in, check_out).nights() == nights


@pytest.mark.unit
def test_parse_accepts_iso_strings() -> None:
    rng = DateRange.parse("2025-06-01", "2025-06-03", today=TODAY)

    assert rng == DateRange(date(2025, 6, 1), date(2025, 6, 3))
    assert rng.to_dict() == {"check_in_date": "2025-06-01", "check_out_date": "2025-06-03"}


@pytest.mark.unit
def test_parse_accepts_check_in_today() -> None:
    rng = DateRange.parse(TODAY, TODAY + timedelta(days=1), today=TODAY)
    assert rng.check_in == TODAY


@pytest.mark.unit
def test_parse_rejects_past_check_in() -> None:
    with pytest.raises(ValidationError, match="Check-in date cannot be in the past"):
        DateRange.parse("2025-01-14", "2025-01-16", today=TODAY)


@pytest.mark.unit
def test_parse_allows_past_check_in_when_recomputing() -> None:
    rng = DateRange.parse("2025-01-10", "2025-01-16", today=TODAY, allow_past=True)
    assert rng.nights() == 6


@pytest.mark.unit
@pytest.mark.parametrize("check_out", ["2025-06-01", "2025-05-30"])
def test_parse_rejects_check_out_not_after_check_in(check_out: str) -> None:
    with pytest.raises(ValidationError, match="Check-out date must be after check-in date"):
        DateRange.parse("2025-06-01", check_out, today=TODAY)


@pytest.mark.unit
def test_parse_rejects_check_in_beyond_horizon() -> None:
    with pytest.raises(ValidationError, match="more than 365 days in advance"):
        DateRange.parse("2026-01-16", "2026-01-18", today=TODAY)


@pytest.mark.unit
def test_parse_horizon_can_be_disabled() -> None:
    rng = DateRange.parse("2027-01-16", "2027-01-18", today=TODAY, horizon_days=None)
    assert rng.nights() == 2


@pytest.mark.unit
@pytest.mark.parametrize("value", ["06/01/2025", "2025-6-1", "tomorrow", 20250601])
def test_parse_date_rejects_bad_format(value: object) -> None:
    with pytest.raises(ValidationError, match="must be in YYYY-MM-DD format"):
        parse_date(value, "Check-in date")


@pytest.mark.unit
def test_parse_date_rejects_impossible_date() -> None:
    with pytest.raises(ValidationError, match="is not a valid date"):
        parse_date("2025-02-30", "Check-in date")


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, ""])
def test_parse_date_requires_value(value: object) -> None:
    with pytest.raises(ValidationError, match="Check-out date is required"):
        parse_date(value, "Check-out date")


@pytest.mark.unit
def test_direct_construction_rejects_empty_range() -> None:
    with pytest.raises(ValidationError):
        DateRange(date(2025, 6, 1), date(2025, 6, 1))
