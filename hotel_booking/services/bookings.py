"""
Booking orchestration: the only place that combines access scoping, date
validation, capacity, pricing and the lifecycle into committed changes.

Every write follows the same order inside a single `engine.begin()`
transaction: lock the room inventory, read, check capacity, price, write.
Notifications are emitted after the transaction commits.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterator, Optional

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from hotel_booking.booking.access import (
    NO_ASSIGNED_HOTELS_MESSAGE,
    Principal,
    ensure_admin,
    ensure_booking_access,
    ensure_customer,
    ensure_hotel_access,
    resolve_scope,
)
from hotel_booking.booking.capacity import CapacityLedger
from hotel_booking.booking.date_range import DateRange
from hotel_booking.booking.lifecycle import (
    BookingState,
    PaymentStatus,
    parse_booking_status,
    parse_payment_status,
)
from hotel_booking.booking.pricing import calculate_price, to_money
from hotel_booking.config import MAX_GUESTS_PER_BOOKING, MAX_ROOMS_PER_BOOKING
from hotel_booking.db.locks import lock_room_inventory
from hotel_booking.db.readers.bookings import (
    get_booking,
    get_booking_detail,
    list_booking_details,
)
from hotel_booking.db.readers.hotels import get_hotel, get_hotel_name
from hotel_booking.db.readers.rooms import get_room
from hotel_booking.db.writers.bookings import insert_booking, update_booking
from hotel_booking.db.writers.payments import insert_payment
from hotel_booking.errors import (
    AccessDeniedError,
    BookingError,
    NotFoundError,
    UpstreamFailure,
    ValidationError,
)
from hotel_booking.metrics import booking_operations, operation_duration, payment_events
from hotel_booking.models.bookings import Booking
from hotel_booking.schemas.bookings import BookingCreatePayload, BookingModifyPayload
from hotel_booking.services.notifications import (
    NotificationEvent,
    NotificationKind,
    NotificationSink,
    emit_notification,
)
from hotel_booking.utils.datetime import today as utc_today

logger = structlog.get_logger(__name__)

ROOM_AVAILABLE = "available"


@dataclass(frozen=True)
class BookingFilters:
    """Optional equality filters for the admin listings."""

    user_id: Optional[int] = None
    hotel_id: Optional[int] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None


@dataclass
class BookingPage:
    items: list[dict[str, Any]]
    total: int
    limit: int
    offset: int
    message: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


def validate_guest_count(value: Optional[int]) -> int:
    count = 1 if value is None else value
    if not 1 <= count <= MAX_GUESTS_PER_BOOKING:
        raise ValidationError(f"number_of_guests must be between 1 and {MAX_GUESTS_PER_BOOKING}")
    return count


def validate_room_count(value: Optional[int]) -> int:
    count = 1 if value is None else value
    if not 1 <= count <= MAX_ROOMS_PER_BOOKING:
        raise ValidationError(f"number_of_rooms must be between 1 and {MAX_ROOMS_PER_BOOKING}")
    return count


def ensure_room_bookable(room: dict[str, Any]) -> None:
    if room["availability_status"] != ROOM_AVAILABLE:
        raise ValidationError(f"Room is currently {room['availability_status']}")


class BookingService:
    """
    Booking operations over an injected engine and notification sink.

    Args:
        engine: SQLAlchemy engine; each operation opens its own connection
        notifier: Where booking events are delivered after commit
        ledger: Capacity ledger (defaults to the configured room capacity)
        today: Clock used for past/horizon date checks
    """

    def __init__(
        self,
        engine: Engine,
        notifier: NotificationSink,
        ledger: Optional[CapacityLedger] = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self.engine = engine
        self.notifier = notifier
        self.ledger = ledger or CapacityLedger()
        self.today = today

    @contextmanager
    def _track(self, operation: str, failure_message: str) -> Iterator[None]:
        """Time the operation, count its outcome and wrap store errors."""
        start = time.perf_counter()
        try:
            yield
        except BookingError as e:
            outcome = "error" if e.status_code >= 500 else "rejected"
            booking_operations.labels(operation=operation, outcome=outcome).inc()
            raise
        except SQLAlchemyError as e:
            booking_operations.labels(operation=operation, outcome="error").inc()
            logger.exception("booking_store_failed", operation=operation, error=str(e))
            raise UpstreamFailure(failure_message) from e
        else:
            booking_operations.labels(operation=operation, outcome="success").inc()
        finally:
            operation_duration.labels(operation=operation).observe(time.perf_counter() - start)

    def _notify(self, event: NotificationEvent) -> None:
        emit_notification(self.notifier, event)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_booking(self, principal: Principal, payload: BookingCreatePayload) -> dict[str, Any]:
        """
        Create a pending booking for the calling customer.

        The total is computed from the room's stored rate; client prices are
        never read.

        Raises:
            AccessDeniedError: Caller is not a customer
            ValidationError: Missing fields, bad counts or dates, room not available
            NotFoundError: Hotel, or room within that hotel, does not exist
            CapacityExceededError: Not enough units left for the stay
        """
        ensure_customer(principal)

        if (
            payload.hotel_id is None
            or payload.room_id is None
            or not payload.check_in_date
            or not payload.check_out_date
        ):
            raise ValidationError(
                "Missing required fields: hotel_id, room_id, check_in_date, check_out_date"
            )

        guests = validate_guest_count(payload.number_of_guests)
        room_count = validate_room_count(payload.number_of_rooms)
        date_range = DateRange.parse(
            payload.check_in_date, payload.check_out_date, today=self.today()
        )

        with self._track("create", "Failed to create booking"):
            with self.engine.begin() as conn:
                hotel = get_hotel(conn, payload.hotel_id)
                if not hotel:
                    raise NotFoundError("Hotel not found")

                lock_room_inventory(conn, payload.room_id)

                room = get_room(conn, payload.room_id)
                if not room or room["hotel_id"] != payload.hotel_id:
                    raise NotFoundError("Room not found in this hotel")
                ensure_room_bookable(room)

                self.ledger.ensure_capacity(
                    conn,
                    payload.room_id,
                    date_range,
                    room_count,
                    capacity=self.ledger.capacity_for(room),
                )
                quote = calculate_price(date_range, room["price_per_night"], room_count)
                state = BookingState.initial()

                booking = insert_booking(
                    conn,
                    {
                        "user_id": principal.user_id,
                        "hotel_id": payload.hotel_id,
                        "room_id": payload.room_id,
                        "check_in_date": date_range.check_in,
                        "check_out_date": date_range.check_out,
                        "number_of_guests": guests,
                        "number_of_rooms": room_count,
                        "total_price": quote.total_price,
                        "status": state.status.value,
                        "payment_status": state.payment_status.value,
                    },
                )

        logger.info(
            "booking_created",
            booking_id=booking["booking_id"],
            room_id=payload.room_id,
            nights=quote.nights,
            number_of_rooms=room_count,
            total_price=str(quote.total_price),
        )
        self._notify(
            NotificationEvent(
                user_id=principal.user_id,
                booking_id=booking["booking_id"],
                hotel_name=hotel["hotel_name"],
                kind=NotificationKind.BOOKING_CONFIRMATION,
            )
        )
        return booking

    def modify_booking(
        self, principal: Principal, booking_id: int, changes: BookingModifyPayload
    ) -> dict[str, Any]:
        """
        Change dates, room, guest count or quantity of a non-terminal booking.

        Dates that are not being changed may already lie in the past (a guest
        extending a stay in progress); a new check-out must lie after today.
        Capacity is re-checked without counting
        the booking itself, and the price is recomputed from the current room
        rate whenever dates, room or quantity change.
        """
        fields = changes.model_dump(exclude_none=True)
        if not fields:
            raise ValidationError("No fields to update")
        if "number_of_guests" in fields:
            validate_guest_count(fields["number_of_guests"])
        if "number_of_rooms" in fields:
            validate_room_count(fields["number_of_rooms"])

        with self._track("modify", "Failed to modify booking"):
            with self.engine.begin() as conn:
                current = get_booking(conn, booking_id)
                if not current:
                    raise NotFoundError("Booking not found")
                ensure_booking_access(principal, current, "modify")

                locked_room_id = fields.get("room_id", current["room_id"])
                lock_room_inventory(conn, locked_room_id)

                # Re-read under the lock; a concurrent cancel or room move may have landed
                current = get_booking(conn, booking_id, for_update=True)
                if not current:
                    raise NotFoundError("Booking not found")
                BookingState.from_row(current).ensure_modifiable()

                room_id = fields.get("room_id", current["room_id"])
                if room_id != locked_room_id:
                    lock_room_inventory(conn, room_id)

                room_changed = room_id != current["room_id"]
                room = get_room(conn, room_id)
                if not room or room["hotel_id"] != current["hotel_id"]:
                    raise NotFoundError("Room not found in this hotel")
                if room_changed:
                    ensure_room_bookable(room)

                dates_changed = "check_in_date" in fields or "check_out_date" in fields
                if dates_changed:
                    date_range = DateRange.parse(
                        fields.get("check_in_date", current["check_in_date"]),
                        fields.get("check_out_date", current["check_out_date"]),
                        today=self.today(),
                        allow_past="check_in_date" not in fields,
                    )
                    if "check_out_date" in fields and date_range.check_out <= self.today():
                        raise ValidationError("Check-out date must be in the future")
                else:
                    date_range = DateRange(current["check_in_date"], current["check_out_date"])

                room_count = fields.get("number_of_rooms", current["number_of_rooms"])
                updates: dict[str, Any] = {}

                if dates_changed or room_changed or "number_of_rooms" in fields:
                    self.ledger.ensure_capacity(
                        conn,
                        room_id,
                        date_range,
                        room_count,
                        excluding_booking_id=booking_id,
                        capacity=self.ledger.capacity_for(room),
                    )
                    quote = calculate_price(date_range, room["price_per_night"], room_count)
                    updates.update(
                        room_id=room_id,
                        check_in_date=date_range.check_in,
                        check_out_date=date_range.check_out,
                        number_of_rooms=room_count,
                        total_price=quote.total_price,
                    )

                if "number_of_guests" in fields:
                    updates["number_of_guests"] = fields["number_of_guests"]

                booking = update_booking(conn, booking_id, updates)
                hotel_name = get_hotel_name(conn, booking["hotel_id"])

        logger.info(
            "booking_modified",
            booking_id=booking_id,
            changed=sorted(fields),
            total_price=str(booking["total_price"]),
        )
        self._notify(
            NotificationEvent(
                user_id=booking["user_id"],
                booking_id=booking_id,
                hotel_name=hotel_name,
                kind=NotificationKind.BOOKING_UPDATE,
                status=booking["status"],
            )
        )
        return booking

    def cancel_booking(self, principal: Principal, booking_id: int) -> dict[str, Any]:
        """
        Cancel a booking on behalf of its owner or an admin in scope.

        Raises:
            NotFoundError: Booking does not exist (checked before access)
            AccessDeniedError: Caller may not touch this booking
            InvalidStateTransitionError: Already cancelled, or completed
        """
        with self._track("cancel", "Failed to cancel booking"):
            with self.engine.begin() as conn:
                current = get_booking(conn, booking_id, for_update=True)
                if not current:
                    raise NotFoundError("Booking not found")
                ensure_booking_access(principal, current, "cancel")

                new_state = BookingState.from_row(current).cancel()
                booking = update_booking(conn, booking_id, {"status": new_state.status.value})
                hotel_name = get_hotel_name(conn, booking["hotel_id"])

        logger.info("booking_cancelled", booking_id=booking_id, cancelled_by=principal.user_id)
        self._notify(
            NotificationEvent(
                user_id=booking["user_id"],
                booking_id=booking_id,
                hotel_name=hotel_name,
                kind=NotificationKind.BOOKING_CANCELLED,
            )
        )
        return booking

    def update_status(
        self,
        principal: Principal,
        booking_id: int,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> dict[str, Any]:
        """Administrative status/payment_status change within the admin's hotels."""
        ensure_admin(principal)
        if status is None and payment_status is None:
            raise ValidationError("No fields to update")

        new_status = parse_booking_status(status) if status is not None else None
        new_payment = parse_payment_status(payment_status) if payment_status is not None else None

        with self._track("update_status", "Failed to update booking status"):
            with self.engine.begin() as conn:
                current = get_booking(conn, booking_id, for_update=True)
                if not current:
                    raise NotFoundError("Booking not found")
                if not resolve_scope(principal).allows_hotel(current["hotel_id"]):
                    raise AccessDeniedError("Access Denied: You do not have access to this hotel")

                state = BookingState.from_row(current)
                new_state = state.apply_update(new_status, new_payment)

                updates: dict[str, Any] = {}
                if new_state.status is not state.status:
                    updates["status"] = new_state.status.value
                if new_state.payment_status is not state.payment_status:
                    updates["payment_status"] = new_state.payment_status.value

                booking = update_booking(conn, booking_id, updates) if updates else current
                hotel_name = get_hotel_name(conn, booking["hotel_id"])

        logger.info(
            "booking_status_updated",
            booking_id=booking_id,
            status=booking["status"],
            payment_status=booking["payment_status"],
            updated_by=principal.user_id,
        )
        self._notify(
            NotificationEvent(
                user_id=booking["user_id"],
                booking_id=booking_id,
                hotel_name=hotel_name,
                kind=NotificationKind.BOOKING_UPDATE,
                status=booking["status"],
            )
        )
        return booking

    # -------------------------------------------------------------------------
    # Payment collaborator reactions
    # -------------------------------------------------------------------------

    def record_capture(
        self,
        booking_id: int,
        succeeded: bool,
        amount: Optional[Decimal] = None,
        transaction_reference: Optional[str] = None,
        gateway: str = "paypal",
    ) -> dict[str, Any]:
        """
        Apply a capture outcome reported by the payment gateway.

        A payments row is stored for both outcomes. On success the booking
        becomes paid, and confirmed if it was pending.
        """
        with self._track("capture", "Failed to record payment"):
            with self.engine.begin() as conn:
                current = get_booking(conn, booking_id, for_update=True)
                if not current:
                    raise NotFoundError("Booking not found")

                new_state = BookingState.from_row(current).after_capture(succeeded)
                paid_amount = to_money(amount if amount is not None else current["total_price"])

                insert_payment(
                    conn,
                    booking_id=booking_id,
                    amount=paid_amount,
                    status=new_state.payment_status.value,
                    gateway=gateway,
                    transaction_reference=transaction_reference,
                )
                booking = update_booking(
                    conn,
                    booking_id,
                    {
                        "status": new_state.status.value,
                        "payment_status": new_state.payment_status.value,
                    },
                )
                hotel_name = get_hotel_name(conn, booking["hotel_id"])

        outcome = "succeeded" if succeeded else "failed"
        payment_events.labels(event="capture", outcome=outcome).inc()
        logger.info(
            "payment_capture_recorded",
            booking_id=booking_id,
            outcome=outcome,
            amount=str(paid_amount),
            status=booking["status"],
        )
        self._notify(
            NotificationEvent(
                user_id=booking["user_id"],
                booking_id=booking_id,
                hotel_name=hotel_name,
                kind=(
                    NotificationKind.PAYMENT_RECEIVED
                    if succeeded
                    else NotificationKind.PAYMENT_FAILED
                ),
                amount=paid_amount,
            )
        )
        return booking

    def record_refund(
        self,
        booking_id: int,
        succeeded: bool,
        amount: Optional[Decimal] = None,
        transaction_reference: Optional[str] = None,
        gateway: str = "paypal",
    ) -> dict[str, Any]:
        """
        Apply a refund outcome. Only a paid booking can be refunded; a failed
        refund is stored but leaves the booking unchanged.
        """
        with self._track("refund", "Failed to record refund"):
            with self.engine.begin() as conn:
                current = get_booking(conn, booking_id, for_update=True)
                if not current:
                    raise NotFoundError("Booking not found")

                new_state = BookingState.from_row(current).after_refund(succeeded)
                refund_amount = to_money(amount if amount is not None else current["total_price"])

                insert_payment(
                    conn,
                    booking_id=booking_id,
                    amount=refund_amount,
                    status=(
                        PaymentStatus.REFUNDED.value if succeeded else PaymentStatus.FAILED.value
                    ),
                    gateway=gateway,
                    transaction_reference=transaction_reference,
                )
                if succeeded:
                    booking = update_booking(
                        conn, booking_id, {"payment_status": new_state.payment_status.value}
                    )
                else:
                    booking = current
                hotel_name = get_hotel_name(conn, booking["hotel_id"])

        outcome = "succeeded" if succeeded else "failed"
        payment_events.labels(event="refund", outcome=outcome).inc()
        logger.info(
            "payment_refund_recorded",
            booking_id=booking_id,
            outcome=outcome,
            amount=str(refund_amount),
        )
        if succeeded:
            self._notify(
                NotificationEvent(
                    user_id=booking["user_id"],
                    booking_id=booking_id,
                    hotel_name=hotel_name,
                    kind=NotificationKind.BOOKING_UPDATE,
                    status=f"{booking['status']}, payment refunded",
                )
            )
        return booking

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_booking(self, principal: Principal, booking_id: int) -> dict[str, Any]:
        with self._track("get", "Failed to fetch booking"):
            with self.engine.connect() as conn:
                booking = get_booking_detail(conn, booking_id)
            if not booking:
                raise NotFoundError("Booking not found")
            ensure_booking_access(principal, booking, "view")
        return booking

    def list_my_bookings(
        self,
        principal: Principal,
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> BookingPage:
        ensure_customer(principal)
        criteria: list[ColumnElement[bool]] = [Booking.user_id == principal.user_id]
        if status:
            criteria.append(Booking.status == parse_booking_status(status).value)
        return self._page(criteria, limit, offset)

    def list_bookings(
        self,
        principal: Principal,
        filters: BookingFilters,
        limit: int,
        offset: int,
    ) -> BookingPage:
        """
        Admin listing. Branch admins only ever see their assigned hotels; a
        hotel_id filter outside that set is refused rather than emptied.
        """
        ensure_admin(principal)
        scope = resolve_scope(principal)
        if scope.is_empty:
            return BookingPage(
                items=[], total=0, limit=limit, offset=offset, message=NO_ASSIGNED_HOTELS_MESSAGE
            )
        if filters.hotel_id is not None:
            scope = scope.narrow_to_hotel(filters.hotel_id)

        criteria = self._filter_criteria(filters)
        hotel_clause = scope.hotel_clause(Booking.hotel_id)
        if hotel_clause is not None:
            criteria.append(hotel_clause)
        return self._page(criteria, limit, offset)

    def list_hotel_bookings(
        self,
        principal: Principal,
        hotel_id: int,
        filters: BookingFilters,
        limit: int,
        offset: int,
    ) -> BookingPage:
        """All bookings of one hotel; access is checked before the hotel is looked up."""
        ensure_hotel_access(principal, hotel_id)

        with self._track("list", "Failed to fetch hotel bookings"):
            with self.engine.connect() as conn:
                hotel = get_hotel(conn, hotel_id)
        if not hotel:
            raise NotFoundError("Hotel not found")

        criteria = self._filter_criteria(filters)
        criteria.append(Booking.hotel_id == hotel_id)
        page = self._page(criteria, limit, offset)
        page.extra["hotel"] = {"hotel_id": hotel["hotel_id"], "hotel_name": hotel["hotel_name"]}
        return page

    def check_availability(
        self,
        room_id: int,
        check_in: Any,
        check_out: Any,
        number_of_rooms: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        Public availability check for a room and stay.

        A room that is not bookable (maintenance, unavailable) is reported as
        unavailable with a reason instead of raising.
        """
        room_count = validate_room_count(number_of_rooms)
        date_range = DateRange.parse(check_in, check_out, today=self.today())

        with self._track("availability", "Failed to check availability"):
            with self.engine.connect() as conn:
                room = get_room(conn, room_id)
                if not room:
                    raise NotFoundError("Room not found")

                result: dict[str, Any] = {
                    "room_id": room_id,
                    "hotel_id": room["hotel_id"],
                    **date_range.to_dict(),
                    "number_of_rooms": room_count,
                }
                if room["availability_status"] != ROOM_AVAILABLE:
                    result.update(
                        available=False,
                        reason=f"Room is currently {room['availability_status']}",
                    )
                    return result

                check = self.ledger.has_capacity(
                    conn, room_id, date_range, room_count, capacity=self.ledger.capacity_for(room)
                )

        quote = calculate_price(date_range, room["price_per_night"], room_count)
        result.update(
            available=check.ok,
            available_units=check.available,
            capacity=check.capacity,
            quote=quote.to_dict(),
        )
        if not check.ok:
            result["reason"] = (
                f"Only {check.available} room(s) available for the selected dates. "
                f"You requested {room_count} room(s)."
            )
        return result

    def _filter_criteria(self, filters: BookingFilters) -> list[ColumnElement[bool]]:
        criteria: list[ColumnElement[bool]] = []
        if filters.user_id is not None:
            criteria.append(Booking.user_id == filters.user_id)
        if filters.status:
            criteria.append(Booking.status == parse_booking_status(filters.status).value)
        if filters.payment_status:
            criteria.append(
                Booking.payment_status == parse_payment_status(filters.payment_status).value
            )
        return criteria

    def _page(self, criteria: list[ColumnElement[bool]], limit: int, offset: int) -> BookingPage:
        with self._track("list", "Failed to fetch bookings"):
            with self.engine.connect() as conn:
                rows, total = list_booking_details(conn, criteria, limit, offset)
        return BookingPage(items=rows, total=total, limit=limit, offset=offset)
