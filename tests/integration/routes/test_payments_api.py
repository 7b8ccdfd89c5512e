"""
Integration tests for the payment gateway callbacks.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.engine import Engine

from hotel_booking.models.payments import Payment
from hotel_booking.services.notifications import NotificationKind


@pytest.mark.integration
def test_capture_requires_basic_auth(client: TestClient) -> None:
    response = client.post("/api/payments/capture", json={"booking_id": 1, "succeeded": True})

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Unauthorized"}


@pytest.mark.integration
def test_capture_rejects_wrong_password(
    client: TestClient, gateway_headers: Callable[..., dict[str, str]]
) -> None:
    response = client.post(
        "/api/payments/capture",
        json={"booking_id": 1, "succeeded": True},
        headers=gateway_headers(password="wrong"),
    )

    assert response.status_code == 401


@pytest.mark.integration
def test_capture_confirms_booking(
    client: TestClient,
    engine: Engine,
    gateway_headers: Callable[..., dict[str, str]],
    add_booking: Callable[..., int],
    sink: Any,
) -> None:
    booking_id = add_booking(date(2025, 6, 1), date(2025, 6, 3), total_price="200.00")

    response = client.post(
        "/api/payments/capture",
        json={"booking_id": booking_id, "succeeded": True, "transaction_reference": "PAY-9"},
        headers=gateway_headers(),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Payment captured"
    assert body["data"]["status"] == "confirmed"
    assert body["data"]["payment_status"] == "paid"
    assert sink.events[-1].kind is NotificationKind.PAYMENT_RECEIVED

    with engine.connect() as conn:
        rows = conn.execute(select(Payment.__table__)).mappings().all()
    assert [(row["payment_gateway"], row["transaction_reference"]) for row in rows] == [
        ("paypal", "PAY-9")
    ]


@pytest.mark.integration
def test_second_capture_is_rejected(
    client: TestClient,
    gateway_headers: Callable[..., dict[str, str]],
    add_booking: Callable[..., int],
) -> None:
    booking_id = add_booking(
        date(2025, 6, 1), date(2025, 6, 3), status="confirmed", payment_status="paid"
    )

    response = client.post(
        "/api/payments/capture",
        json={"booking_id": booking_id, "succeeded": True},
        headers=gateway_headers(),
    )

    assert response.status_code == 400


@pytest.mark.integration
def test_refund_for_unknown_booking(
    client: TestClient, gateway_headers: Callable[..., dict[str, str]]
) -> None:
    response = client.post(
        "/api/payments/refund",
        json={"booking_id": 999, "succeeded": True},
        headers=gateway_headers(),
    )

    assert response.status_code == 404


@pytest.mark.integration
def test_refund_paid_booking(
    client: TestClient,
    gateway_headers: Callable[..., dict[str, str]],
    add_booking: Callable[..., int],
) -> None:
    booking_id = add_booking(
        date(2025, 6, 1), date(2025, 6, 3), status="cancelled", payment_status="paid"
    )

    response = client.post(
        "/api/payments/refund",
        json={"booking_id": booking_id, "succeeded": True, "amount": "100.00"},
        headers=gateway_headers(),
    )

    assert response.status_code == 200
    assert response.json()["data"]["payment_status"] == "refunded"
