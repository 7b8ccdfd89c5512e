"""
Unit tests for the pure capacity rule and per-room capacity resolution.
"""

from __future__ import annotations

import pytest

from hotel_booking.booking.capacity import CapacityCheck, CapacityLedger, evaluate_capacity


@pytest.mark.unit
@pytest.mark.parametrize(
    "booked, requested, capacity, ok, available",
    [
        (0, 10, 10, True, 10),
        (8, 2, 10, True, 2),
        (8, 3, 10, False, 2),
        (10, 1, 10, False, 0),
        (12, 1, 10, False, 0),  # over-committed rooms never report negative availability
        (0, 1, 0, False, 0),
    ],
)
def test_evaluate_capacity(
    booked: int, requested: int, capacity: int, ok: bool, available: int
) -> None:
    check = evaluate_capacity(booked, requested, capacity)

    assert check == CapacityCheck(ok=ok, available=available, booked=booked, capacity=capacity)


@pytest.mark.unit
def test_capacity_for_uses_room_override() -> None:
    ledger = CapacityLedger(default_capacity=10)

    assert ledger.capacity_for({"capacity": 2}) == 2
    assert ledger.capacity_for({"capacity": None}) == 10
    assert ledger.capacity_for(None) == 10


@pytest.mark.unit
def test_default_capacity_is_configurable() -> None:
    assert CapacityLedger(default_capacity=4).capacity_for({}) == 4
