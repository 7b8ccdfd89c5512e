"""
FastAPI dependency injection providers.

The engine and booking service live on `app.state` (set by `create_app`),
so tests can build an app around their own engine and routes never import a
module-level database handle.
"""

from __future__ import annotations

from typing import Any, Generator, Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.engine import Engine

from hotel_booking.booking.access import Principal, ensure_admin, ensure_customer
from hotel_booking.config import JWT_ALGORITHM, JWT_SECRET
from hotel_booking.db.readers.users import load_principal
from hotel_booking.errors import AccessDeniedError, AuthenticationError, NotFoundError
from hotel_booking.services.bookings import BookingService

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db_engine(request: Request) -> Generator[Engine, None, None]:
    """
    Provide the application's database engine.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: sqlite_engine
    """
    yield request.app.state.engine


def get_booking_service(request: Request) -> BookingService:
    service: BookingService = request.app.state.booking_service
    return service


def decode_token_email(token: str) -> str:
    """
    Verify a bearer token and return the email it was issued for.

    Raises:
        AccessDeniedError: If the token is invalid, expired or has no email
    """
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.info("token_rejected", error=str(e))
        raise AccessDeniedError("Invalid or expired token") from None

    email = claims.get("email") or claims.get("sub")
    if not email:
        raise AccessDeniedError("Invalid or expired token")
    return str(email)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    engine: Engine = Depends(get_db_engine),
) -> Principal:
    """
    Authenticate the caller and load its role and hotel assignments.

    Raises:
        AuthenticationError: 401 when no bearer token was sent
        AccessDeniedError: 403 when the token does not verify
        NotFoundError: 404 when no user matches the token's email
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized: No token provided")

    email = decode_token_email(credentials.credentials)

    with engine.connect() as conn:
        principal = load_principal(conn, email)

    if principal is None:
        raise NotFoundError("User not found in database")

    structlog.contextvars.bind_contextvars(user_id=principal.user_id, role=principal.role.value)
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    ensure_admin(principal)
    return principal


def require_customer(principal: Principal = Depends(get_current_principal)) -> Principal:
    ensure_customer(principal)
    return principal
