"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP hotel_booking_operations_total Total booking operations by outcome
        # TYPE hotel_booking_operations_total counter
        hotel_booking_operations_total{operation="create",outcome="success"} 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """Expose all registered metrics in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
