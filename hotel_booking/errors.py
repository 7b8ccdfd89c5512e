"""
Error taxonomy for the booking core and its FastAPI translation.

Domain code raises these exceptions; `register_exception_handlers` turns them
into `{"success": false, "error": ...}` responses with the matching status.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class BookingError(Exception):
    """Base class for errors that map onto a client-visible HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"success": False, "error": self.message}


class ValidationError(BookingError):
    """Malformed or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(BookingError):
    """No credentials were supplied."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AccessDeniedError(BookingError):
    """Role or ownership does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BookingError):
    """Hotel, room, booking or user is absent."""

    status_code = status.HTTP_404_NOT_FOUND


class CapacityExceededError(BookingError):
    """Requested units do not fit in the room's remaining capacity."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            f"Only {available} room(s) available for the selected dates. "
            f"You requested {requested} room(s)."
        )
        self.available = available
        self.requested = requested

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["available"] = self.available
        payload["requested"] = self.requested
        return payload


class InvalidStateTransitionError(BookingError):
    """The booking's current status does not allow the requested change."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamFailure(BookingError):
    """The store or another collaborator failed; the operation did not happen."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    """Attach JSON handlers for domain and request-validation errors."""

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "request_failed",
                path=str(request.url.path),
                error=exc.message,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Missing or mistyped fields are client errors like any other ValidationError
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Invalid request data",
                "errors": jsonable_errors(exc),
            },
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Strip non-serializable context (e.g. the raw exception) from pydantic errors."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
