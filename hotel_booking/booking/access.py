"""
Role model and access scoping for hotels, rooms and bookings.

Roles:
    customer      - own bookings only
    branch_admin  - hotels listed in the principal's assigned_hotel_ids
    super_admin   - everything
    admin         - legacy tag, treated as super_admin

`resolve_scope()` turns a principal into an `AccessScope`, whose
`hotel_clause()` is ANDed into every hotel/room/booking query the admin
endpoints run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

import structlog
from sqlalchemy import false
from sqlalchemy.sql.elements import ColumnElement

from hotel_booking.errors import AccessDeniedError

logger = structlog.get_logger(__name__)


class Role(str, Enum):
    CUSTOMER = "customer"
    BRANCH_ADMIN = "branch_admin"
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"


ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN, Role.BRANCH_ADMIN})
UNRESTRICTED_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})

NO_ASSIGNED_HOTELS_MESSAGE = "No hotels assigned to your account"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, with hotel assignments loaded once per request."""

    user_id: int
    email: str
    role: Role
    name: Optional[str] = None
    assigned_hotel_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_unrestricted(self) -> bool:
        return self.role in UNRESTRICTED_ROLES


@dataclass(frozen=True)
class AccessScope:
    """
    Rows a principal may see or mutate.

    Attributes:
        unrestricted: True for super_admin/admin
        hotel_ids: Allowed hotels for branch admins (None when not hotel-scoped)
        user_id: Owning user for customers (None when not owner-scoped)
    """

    unrestricted: bool = False
    hotel_ids: Optional[frozenset[int]] = None
    user_id: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        """A branch admin with no assigned hotels can see nothing."""
        return not self.unrestricted and self.hotel_ids is not None and not self.hotel_ids

    def allows_hotel(self, hotel_id: int) -> bool:
        if self.unrestricted:
            return True
        return self.hotel_ids is not None and hotel_id in self.hotel_ids

    def hotel_clause(self, hotel_id_column: Any) -> Optional[ColumnElement[bool]]:
        """
        Predicate restricting `hotel_id_column` to this scope.

        Returns None when no restriction applies. An empty assignment set
        yields a constant false so the query returns nothing.
        """
        if self.unrestricted or self.hotel_ids is None:
            return None
        if not self.hotel_ids:
            return false()
        return hotel_id_column.in_(sorted(self.hotel_ids))

    def owner_clause(self, user_id_column: Any) -> Optional[ColumnElement[bool]]:
        if self.user_id is None:
            return None
        return user_id_column == self.user_id

    def narrow_to_hotel(self, hotel_id: int) -> AccessScope:
        """
        Restrict the scope to one requested hotel.

        Raises:
            AccessDeniedError: If the hotel lies outside the scope
        """
        if not self.allows_hotel(hotel_id):
            raise AccessDeniedError("Access Denied: You do not have access to this hotel")
        return AccessScope(hotel_ids=frozenset({hotel_id}), user_id=self.user_id)


def parse_role(value: str) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise AccessDeniedError(f"Access Denied: unknown role {value!r}") from None


def build_principal(row: Mapping[str, Any], assigned_hotel_ids: Iterable[int] = ()) -> Principal:
    """Build a principal from a users row plus its hotel assignment ids."""
    return Principal(
        user_id=row["user_id"],
        email=row["email"],
        name=row.get("name"),
        role=parse_role(row["role"]),
        assigned_hotel_ids=frozenset(int(h) for h in assigned_hotel_ids),
    )


def resolve_scope(principal: Principal) -> AccessScope:
    """Map a principal to the rows it may access."""
    if principal.role is Role.ADMIN:
        logger.info("legacy_admin_role_used", user_id=principal.user_id)
    if principal.is_unrestricted:
        return AccessScope(unrestricted=True)
    if principal.role is Role.BRANCH_ADMIN:
        return AccessScope(hotel_ids=principal.assigned_hotel_ids)
    return AccessScope(user_id=principal.user_id)


def ensure_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise AccessDeniedError("Access Denied: Admins only")


def ensure_customer(principal: Principal) -> None:
    if principal.role is not Role.CUSTOMER:
        raise AccessDeniedError("Access Denied: Customers only")


def ensure_hotel_access(principal: Principal, hotel_id: int) -> None:
    """
    Hotel-scoped check, run before the hotel is looked up so existence is
    not revealed to callers outside the scope.
    """
    ensure_admin(principal)
    if not resolve_scope(principal).allows_hotel(hotel_id):
        raise AccessDeniedError("Access Denied: You do not have access to this hotel")


def can_access_booking(principal: Principal, booking: Mapping[str, Any]) -> bool:
    if booking["user_id"] == principal.user_id:
        return True
    if not principal.is_admin:
        return False
    return resolve_scope(principal).allows_hotel(booking["hotel_id"])


def ensure_booking_access(principal: Principal, booking: Mapping[str, Any], action: str) -> None:
    """
    Booking-scoped check, run after the booking was found (404 before 403).

    Owners always pass; admins pass within their hotel scope.
    """
    if not can_access_booking(principal, booking):
        raise AccessDeniedError(f"Access denied. You can only {action} your own bookings.")
