"""
Booking state machine.

A booking carries two independent axes: `status` (pending, confirmed,
cancelled, completed) and `payment_status` (pending, paid, failed, refunded).
`BookingState` is immutable; every transition returns a new state or raises
`InvalidStateTransitionError`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from hotel_booking.errors import InvalidStateTransitionError, ValidationError


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# Bookings in these states hold room capacity
ACTIVE_STATUSES: tuple[BookingStatus, ...] = (BookingStatus.PENDING, BookingStatus.CONFIRMED)
TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.COMPLETED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING, PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


def parse_booking_status(value: str) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid status. Must be: pending, confirmed, cancelled, or completed"
        ) from None


def parse_payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid payment_status. Must be: pending, paid, failed, or refunded"
        ) from None


@dataclass(frozen=True)
class BookingState:
    status: BookingStatus
    payment_status: PaymentStatus

    @classmethod
    def initial(cls) -> BookingState:
        return cls(BookingStatus.PENDING, PaymentStatus.PENDING)

    @classmethod
    def from_row(cls, row: dict) -> BookingState:
        return cls(BookingStatus(row["status"]), PaymentStatus(row["payment_status"]))

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def holds_capacity(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def ensure_modifiable(self) -> None:
        """Dates, room, guests and quantity can only change on a non-terminal booking."""
        if self.status is BookingStatus.CANCELLED:
            raise InvalidStateTransitionError("Cannot modify a cancelled booking")
        if self.status is BookingStatus.COMPLETED:
            raise InvalidStateTransitionError("Cannot modify a completed booking")

    def cancel(self) -> BookingState:
        if self.status is BookingStatus.CANCELLED:
            raise InvalidStateTransitionError("Booking is already cancelled")
        if self.status is BookingStatus.COMPLETED:
            raise InvalidStateTransitionError("Cannot cancel a completed booking")
        return replace(self, status=BookingStatus.CANCELLED)

    def apply_update(
        self,
        status: Optional[BookingStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> BookingState:
        """
        Apply an administrative status update.

        Either axis may be omitted. Setting an axis to its current value is a
        no-op. Payment status may still move on a cancelled booking (refunds).

        Raises:
            InvalidStateTransitionError: If either requested move is not allowed
        """
        new_state = self

        if status is not None and status is not self.status:
            if status not in BOOKING_TRANSITIONS[self.status]:
                raise InvalidStateTransitionError(
                    f"Cannot change booking status from {self.status.value} to {status.value}"
                )
            new_state = replace(new_state, status=status)

        if payment_status is not None and payment_status is not self.payment_status:
            if payment_status not in PAYMENT_TRANSITIONS[self.payment_status]:
                raise InvalidStateTransitionError(
                    f"Cannot change payment status from {self.payment_status.value} "
                    f"to {payment_status.value}"
                )
            new_state = replace(new_state, payment_status=payment_status)

        return new_state

    def after_capture(self, succeeded: bool) -> BookingState:
        """
        React to a payment capture report.

        A successful capture marks the payment paid and confirms a pending
        booking; a terminal booking keeps its status. A failed capture only
        marks the payment failed.
        """
        if not succeeded:
            if self.payment_status is PaymentStatus.PAID:
                raise InvalidStateTransitionError("Booking is already paid")
            return replace(self, payment_status=PaymentStatus.FAILED)

        if self.payment_status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
            raise InvalidStateTransitionError(
                f"Cannot capture payment for a booking that is {self.payment_status.value}"
            )

        new_status = (
            BookingStatus.CONFIRMED if self.status is BookingStatus.PENDING else self.status
        )
        return BookingState(new_status, PaymentStatus.PAID)

    def after_refund(self, succeeded: bool) -> BookingState:
        """A successful full refund forces payment_status to refunded."""
        if self.payment_status is not PaymentStatus.PAID:
            raise InvalidStateTransitionError(
                f"Cannot refund a booking whose payment is {self.payment_status.value}"
            )
        if not succeeded:
            return self
        return replace(self, payment_status=PaymentStatus.REFUNDED)
