"""
Unit tests for roles and access scoping.
"""

from __future__ import annotations

import pytest
from sqlalchemy import column, select, table
from sqlalchemy.dialects import sqlite
from sqlalchemy.sql.elements import False_

from hotel_booking.booking.access import (
    AccessScope,
    Principal,
    Role,
    build_principal,
    can_access_booking,
    ensure_admin,
    ensure_booking_access,
    ensure_customer,
    ensure_hotel_access,
    parse_role,
    resolve_scope,
)
from hotel_booking.errors import AccessDeniedError

bookings = table("bookings", column("hotel_id"), column("user_id"))

BRANCH = Principal(
    3, "branch@example.com", Role.BRANCH_ADMIN, assigned_hotel_ids=frozenset({3, 9})
)
SUPER = Principal(4, "super@example.com", Role.SUPER_ADMIN)
LEGACY = Principal(5, "admin@example.com", Role.ADMIN)
ALICE = Principal(1, "alice@example.com", Role.CUSTOMER)


def _sql(clause: object) -> str:
    stmt = select(bookings.c.hotel_id).where(clause)  # type: ignore[arg-type]
    return str(stmt.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


@pytest.mark.unit
def test_branch_admin_scope_is_assigned_hotels() -> None:
    scope = resolve_scope(BRANCH)

    assert scope.hotel_ids == frozenset({3, 9})
    assert scope.allows_hotel(3) and scope.allows_hotel(9)
    assert not scope.allows_hotel(5)
    assert "IN (3, 9)" in _sql(scope.hotel_clause(bookings.c.hotel_id))


@pytest.mark.unit
def test_branch_admin_hotel_filter_outside_scope_is_denied() -> None:
    """A hotel_id filter of 5 is refused rather than silently returning nothing."""
    scope = resolve_scope(BRANCH)

    with pytest.raises(AccessDeniedError):
        scope.narrow_to_hotel(5)

    narrowed = scope.narrow_to_hotel(9)
    assert narrowed.hotel_ids == frozenset({9})


@pytest.mark.unit
def test_hotel_clause_composes_with_other_filters() -> None:
    scope = resolve_scope(BRANCH)
    clause = scope.hotel_clause(bookings.c.hotel_id) & (bookings.c.user_id == 7)

    sql = _sql(clause)
    assert "IN (3, 9)" in sql
    assert "user_id = 7" in sql


@pytest.mark.unit
@pytest.mark.parametrize("principal", [SUPER, LEGACY])
def test_unrestricted_roles(principal: Principal) -> None:
    scope = resolve_scope(principal)

    assert scope.unrestricted
    assert scope.hotel_clause(bookings.c.hotel_id) is None
    assert scope.allows_hotel(12345)


@pytest.mark.unit
def test_empty_assignment_yields_false_clause() -> None:
    scope = resolve_scope(Principal(6, "lonely@example.com", Role.BRANCH_ADMIN))

    assert scope.is_empty
    assert isinstance(scope.hotel_clause(bookings.c.hotel_id), False_)


@pytest.mark.unit
def test_customer_scope_is_owner_only() -> None:
    scope = resolve_scope(ALICE)

    assert scope == AccessScope(user_id=1)
    assert "user_id = 1" in _sql(scope.owner_clause(bookings.c.user_id))


@pytest.mark.unit
def test_role_guards() -> None:
    ensure_admin(BRANCH)
    ensure_admin(LEGACY)
    ensure_customer(ALICE)

    with pytest.raises(AccessDeniedError, match="Admins only"):
        ensure_admin(ALICE)
    with pytest.raises(AccessDeniedError, match="Customers only"):
        ensure_customer(SUPER)


@pytest.mark.unit
def test_hotel_access_is_checked_without_lookup() -> None:
    ensure_hotel_access(BRANCH, 3)
    ensure_hotel_access(SUPER, 999)

    with pytest.raises(AccessDeniedError):
        ensure_hotel_access(BRANCH, 1)
    with pytest.raises(AccessDeniedError):
        ensure_hotel_access(ALICE, 3)


@pytest.mark.unit
def test_booking_access() -> None:
    own = {"user_id": 1, "hotel_id": 1}
    in_branch = {"user_id": 2, "hotel_id": 9}

    assert can_access_booking(ALICE, own)
    assert not can_access_booking(ALICE, in_branch)
    assert can_access_booking(BRANCH, in_branch)
    assert not can_access_booking(BRANCH, own)
    assert can_access_booking(LEGACY, own)

    with pytest.raises(AccessDeniedError, match="You can only cancel your own bookings"):
        ensure_booking_access(ALICE, in_branch, "cancel")


@pytest.mark.unit
def test_build_principal_from_row() -> None:
    row = {"user_id": 3, "email": "branch@example.com", "name": "B", "role": "branch_admin"}
    principal = build_principal(row, [9, 3])

    assert principal == Principal(
        3, "branch@example.com", Role.BRANCH_ADMIN, name="B", assigned_hotel_ids=frozenset({3, 9})
    )
    assert principal.is_admin and not principal.is_unrestricted


@pytest.mark.unit
def test_unknown_role_is_denied() -> None:
    with pytest.raises(AccessDeniedError):
        parse_role("owner")
