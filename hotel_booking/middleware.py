"""
FastAPI middleware for request tracing and correlation.

Each request gets a unique ID that is returned as X-Request-ID and bound
into structlog's context, so every log line of the request carries it.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add unique request IDs to each HTTP request.

    The ID is:
    1. Stored in request.state.request_id for route handlers
    2. Bound as `request_id` in structlog contextvars for the request's logs
    3. Returned to the client in the X-Request-ID response header

    Example:
        >>> app.add_middleware(RequestIDMiddleware)
        >>> # Response headers will include:
        >>> # X-Request-ID: 550e8400-e29b-41d4-a716-446655440000
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        # Drop context left over from a previous request on this worker
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response
