"""
Booking notifications.

The booking service emits a `NotificationEvent` after each committed change.
Delivery is best effort: `emit_notification` logs and counts failures but
never raises, so a committed booking is never reported as failed because a
notification could not be sent.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Protocol

import requests
import structlog
from sqlalchemy.engine import Engine

from hotel_booking.booking.pricing import format_price
from hotel_booking.db.writers.notifications import insert_notification
from hotel_booking.metrics import notification_failures

logger = structlog.get_logger(__name__)

WEBHOOK_TIMEOUT = 5
WEBHOOK_MAX_RETRIES = 2
WEBHOOK_RETRY_DELAY = 0.5


class NotificationKind(str, Enum):
    BOOKING_CONFIRMATION = "booking_confirmation"
    BOOKING_UPDATE = "booking_update"
    BOOKING_CANCELLED = "booking_cancelled"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_FAILED = "payment_failed"


@dataclass(frozen=True)
class NotificationEvent:
    user_id: int
    booking_id: int
    hotel_name: str
    kind: NotificationKind
    status: Optional[str] = None
    amount: Optional[Decimal] = None

    def render(self) -> tuple[str, str]:
        """Title and message shown to the guest."""
        if self.kind is NotificationKind.BOOKING_CONFIRMATION:
            return (
                "Booking Confirmed",
                f"Your booking at {self.hotel_name} has been confirmed. "
                f"Booking ID: {self.booking_id}",
            )
        if self.kind is NotificationKind.BOOKING_UPDATE:
            return (
                "Booking Updated",
                f"Your booking at {self.hotel_name} has been updated. Status: {self.status}",
            )
        if self.kind is NotificationKind.BOOKING_CANCELLED:
            return (
                "Booking Cancelled",
                f"Your booking at {self.hotel_name} has been cancelled. "
                f"Booking ID: {self.booking_id}",
            )
        if self.kind is NotificationKind.PAYMENT_RECEIVED:
            amount = format_price(self.amount or 0)
            return (
                "Payment Received",
                f"Payment of {amount} has been received for your booking at {self.hotel_name}.",
            )
        return (
            "Payment Failed",
            f"Payment for your booking at {self.hotel_name} could not be processed. "
            f"Booking ID: {self.booking_id}",
        )

    def to_dict(self) -> dict[str, Any]:
        title, message = self.render()
        return {
            "user_id": self.user_id,
            "booking_id": self.booking_id,
            "hotel_name": self.hotel_name,
            "type": self.kind.value,
            "status": self.status,
            "title": title,
            "message": message,
        }


class NotificationSink(Protocol):
    def notify(self, event: NotificationEvent) -> None: ...


class DatabaseNotificationSink:
    """Stores notifications as unread rows in the notifications table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def notify(self, event: NotificationEvent) -> None:
        title, message = event.render()
        with self.engine.begin() as conn:
            notification_id = insert_notification(
                conn,
                user_id=event.user_id,
                kind=event.kind.value,
                title=title,
                message=message,
                related_booking_id=event.booking_id,
            )
        logger.debug(
            "notification_stored",
            notification_id=notification_id,
            booking_id=event.booking_id,
            kind=event.kind.value,
        )


def should_retry(res: Optional[requests.Response], err: Optional[Exception]) -> bool:
    """
    Determine whether a webhook delivery should be retried.

    Args:
        res (Optional[requests.Response]): Response object if available.
        err (Optional[Exception]): Exception raised by the request, if any.

    Returns:
        bool: True for rate limiting, timeouts and server errors.
    """
    if res is not None and res.status_code == 429:
        return True
    if isinstance(err, (requests.Timeout, requests.ConnectionError)):
        return True
    if res is not None and 500 <= res.status_code < 600:
        return True
    return False


class WebhookNotificationSink:
    """POSTs each event as JSON to an external notification service."""

    def __init__(
        self,
        url: str,
        timeout: float = WEBHOOK_TIMEOUT,
        max_retries: int = WEBHOOK_MAX_RETRIES,
        retry_delay: float = WEBHOOK_RETRY_DELAY,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def notify(self, event: NotificationEvent) -> None:
        """
        Deliver the event, retrying transient failures.

        Raises:
            requests.RequestException: If delivery still fails after all retries
        """
        retries = 0
        while True:
            res: Optional[requests.Response] = None
            try:
                res = requests.post(self.url, json=event.to_dict(), timeout=self.timeout)
                res.raise_for_status()
                return
            except requests.RequestException as err:
                retries += 1
                if retries > self.max_retries or not should_retry(res, err):
                    raise
                logger.warning(
                    "notification_webhook_retry",
                    booking_id=event.booking_id,
                    attempt=retries,
                    error=str(err),
                )
                time.sleep(self.retry_delay * retries)


def emit_notification(sink: NotificationSink, event: NotificationEvent) -> bool:
    """
    Deliver an event through the sink without ever raising.

    Returns:
        bool: True if the sink accepted the event
    """
    try:
        sink.notify(event)
        return True
    except Exception as e:
        notification_failures.labels(kind=event.kind.value).inc()
        logger.error(
            "notification_failed",
            booking_id=event.booking_id,
            user_id=event.user_id,
            kind=event.kind.value,
            error=str(e),
        )
        return False
