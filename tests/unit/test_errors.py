"""
Unit tests for the error taxonomy and its HTTP translation.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from hotel_booking.errors import (
    AccessDeniedError,
    AuthenticationError,
    CapacityExceededError,
    InvalidStateTransitionError,
    NotFoundError,
    UpstreamFailure,
    ValidationError,
    register_exception_handlers,
)


class _Body(BaseModel):
    count: int


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/capacity")
    def capacity() -> None:
        raise CapacityExceededError(available=2, requested=3)

    @app.get("/upstream")
    def upstream() -> None:
        raise UpstreamFailure("Failed to create booking")

    @app.post("/body")
    def body(payload: _Body) -> dict[str, int]:
        return {"count": payload.count}

    return TestClient(app)


@pytest.mark.unit
@pytest.mark.parametrize(
    "error, status_code",
    [
        (ValidationError("x"), 400),
        (AuthenticationError("x"), 401),
        (AccessDeniedError("x"), 403),
        (NotFoundError("x"), 404),
        (CapacityExceededError(1, 2), 400),
        (InvalidStateTransitionError("x"), 400),
        (UpstreamFailure("x"), 500),
    ],
)
def test_status_codes(error: Exception, status_code: int) -> None:
    assert error.status_code == status_code  # type: ignore[attr-defined]


@pytest.mark.unit
def test_capacity_error_payload(client: TestClient) -> None:
    response = client.get("/capacity")

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Only 2 room(s) available for the selected dates. You requested 3 room(s).",
        "available": 2,
        "requested": 3,
    }


@pytest.mark.unit
def test_upstream_failure_payload(client: TestClient) -> None:
    response = client.get("/upstream")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to create booking"}


@pytest.mark.unit
def test_request_validation_maps_to_400(client: TestClient) -> None:
    response = client.post("/body", json={"count": "many"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Invalid request data"
    assert body["errors"][0]["loc"] == ["body", "count"]
