"""Payment gateway callback routes (capture and refund outcomes)."""

import base64
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request

from hotel_booking.config import PAYMENT_WEBHOOK_PASSWORD, PAYMENT_WEBHOOK_USERNAME
from hotel_booking.dependencies import get_booking_service
from hotel_booking.errors import AuthenticationError, BookingError, UpstreamFailure
from hotel_booking.routes._booking_helpers import serialize_booking
from hotel_booking.schemas.payments import PaymentEventPayload
from hotel_booking.services.bookings import BookingService

router = APIRouter()
logger = structlog.get_logger(__name__)


def validate_basic_auth(auth_header: str | None) -> bool:
    """
    Validate HTTP Basic Auth credentials against the payment webhook credentials.

    Args:
        auth_header: Authorization header value (e.g., "Basic dXNlcjpwYXNz")

    Returns:
        bool: True if credentials match, False otherwise (always False when
        no credentials are configured)
    """
    if not PAYMENT_WEBHOOK_USERNAME or not PAYMENT_WEBHOOK_PASSWORD:
        return False
    if not auth_header or not auth_header.startswith("Basic "):
        return False

    try:
        encoded_credentials = auth_header.replace("Basic ", "")
        decoded_credentials = base64.b64decode(encoded_credentials).decode("utf-8")
        username, password = decoded_credentials.split(":", 1)

        return username == PAYMENT_WEBHOOK_USERNAME and password == PAYMENT_WEBHOOK_PASSWORD
    except Exception:
        logger.exception("Failed to decode Basic Auth header")
        return False


def require_payment_gateway(request: Request) -> None:
    if not validate_basic_auth(request.headers.get("Authorization")):
        logger.warning("payment_webhook_unauthorized", path=request.url.path)
        raise AuthenticationError("Unauthorized")


@router.post("/payments/capture", dependencies=[Depends(require_payment_gateway)])
def capture_payment(
    payload: PaymentEventPayload,
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """
    Record a capture outcome.

    A successful capture marks the booking paid and confirms it if pending;
    a failed one marks the payment failed. Both are stored as payments rows.
    """
    try:
        booking = service.record_capture(
            payload.booking_id,
            payload.succeeded,
            amount=payload.amount,
            transaction_reference=payload.transaction_reference,
            gateway=payload.gateway,
        )
        return {
            "success": True,
            "message": "Payment captured" if payload.succeeded else "Payment failure recorded",
            "data": serialize_booking(booking),
        }
    except BookingError:
        raise
    except Exception as e:
        logger.exception("payment_capture_failed", booking_id=payload.booking_id, error=str(e))
        raise UpstreamFailure("Failed to record payment") from e


@router.post("/payments/refund", dependencies=[Depends(require_payment_gateway)])
def refund_payment(
    payload: PaymentEventPayload,
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    """Record a refund outcome for a paid booking."""
    try:
        booking = service.record_refund(
            payload.booking_id,
            payload.succeeded,
            amount=payload.amount,
            transaction_reference=payload.transaction_reference,
            gateway=payload.gateway,
        )
        return {
            "success": True,
            "message": "Refund recorded" if payload.succeeded else "Refund failure recorded",
            "data": serialize_booking(booking),
        }
    except BookingError:
        raise
    except Exception as e:
        logger.exception("payment_refund_failed", booking_id=payload.booking_id, error=str(e))
        raise UpstreamFailure("Failed to record refund") from e
