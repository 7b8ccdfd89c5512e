"""
Shared fixtures: an in-memory SQLite database seeded with hotels, rooms and
users of every role, plus an app wired to it.
"""

from __future__ import annotations

import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("PAYMENT_WEBHOOK_USERNAME", "gateway")
os.environ.setdefault("PAYMENT_WEBHOOK_PASSWORD", "gateway-secret")

import base64  # noqa: E402
from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any, Callable, Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine, insert  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from hotel_booking.booking.access import Principal, Role  # noqa: E402
from hotel_booking.config import (  # noqa: E402
    JWT_ALGORITHM,
    JWT_SECRET,
    PAYMENT_WEBHOOK_PASSWORD,
    PAYMENT_WEBHOOK_USERNAME,
)
from hotel_booking.main import create_app  # noqa: E402
from hotel_booking.models.base import Base  # noqa: E402
from hotel_booking.models.bookings import Booking  # noqa: E402
from hotel_booking.models.hotels import Hotel  # noqa: E402
from hotel_booking.models.notifications import Notification  # noqa: E402, F401
from hotel_booking.models.payments import Payment  # noqa: E402, F401
from hotel_booking.models.rooms import Room  # noqa: E402
from hotel_booking.models.users import User, UserHotelAssignment  # noqa: E402
from hotel_booking.services.bookings import BookingService  # noqa: E402
from hotel_booking.services.notifications import NotificationEvent  # noqa: E402

# All date checks in tests run against this "today"
FIXED_TODAY = date(2025, 1, 15)

CUSTOMER_EMAIL = "alice@example.com"
OTHER_CUSTOMER_EMAIL = "bob@example.com"
BRANCH_ADMIN_EMAIL = "branch@example.com"
SUPER_ADMIN_EMAIL = "super@example.com"
LEGACY_ADMIN_EMAIL = "admin@example.com"
UNASSIGNED_ADMIN_EMAIL = "lonely@example.com"

HOTELS = [
    {"hotel_id": 1, "hotel_name": "Seaside Inn", "city": "Cape Town"},
    {"hotel_id": 2, "hotel_name": "Mountain Lodge", "city": "Stellenbosch"},
    {"hotel_id": 3, "hotel_name": "City Central", "city": "Johannesburg"},
    {"hotel_id": 9, "hotel_name": "Harbour View", "city": "Durban"},
]

ROOMS = [
    # room_id, hotel_id, type, rate, status, capacity
    (1, 1, "Double", "150.00", "available", 2),
    (2, 1, "Suite", "80.00", "maintenance", None),
    (3, 1, "Single", "120.50", "available", None),
    (7, 3, "Standard", "100.00", "available", None),
    (8, 3, "Deluxe", "250.00", "available", None),
    (9, 9, "Family", "200.00", "available", None),
]

USERS = [
    (1, CUSTOMER_EMAIL, "Alice", "customer"),
    (2, OTHER_CUSTOMER_EMAIL, "Bob", "customer"),
    (3, BRANCH_ADMIN_EMAIL, "Branch Admin", "branch_admin"),
    (4, SUPER_ADMIN_EMAIL, "Super Admin", "super_admin"),
    (5, LEGACY_ADMIN_EMAIL, "Legacy Admin", "admin"),
    (6, UNASSIGNED_ADMIN_EMAIL, "Unassigned Admin", "branch_admin"),
]


class RecordingSink:
    """Notification sink that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    def notify(self, event: NotificationEvent) -> None:
        self.events.append(event)


def _seed(engine: Engine) -> None:
    with engine.begin() as conn:
        conn.execute(
            insert(Hotel),
            [
                {
                    **hotel,
                    "address": f"{hotel['hotel_id']} Main Road",
                    "country": "South Africa",
                    "amenities": [],
                }
                for hotel in HOTELS
            ],
        )
        conn.execute(
            insert(Room),
            [
                {
                    "room_id": room_id,
                    "hotel_id": hotel_id,
                    "room_type": room_type,
                    "price_per_night": Decimal(rate),
                    "availability_status": status,
                    "capacity": capacity,
                }
                for room_id, hotel_id, room_type, rate, status, capacity in ROOMS
            ],
        )
        conn.execute(
            insert(User),
            [
                {"user_id": user_id, "email": email, "name": name, "role": role}
                for user_id, email, name, role in USERS
            ],
        )
        conn.execute(
            insert(UserHotelAssignment),
            [{"user_id": 3, "hotel_id": 3}, {"user_id": 3, "hotel_id": 9}],
        )


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Seeded in-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    _seed(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def add_booking(engine: Engine) -> Callable[..., int]:
    """Insert a booking row directly and return its id."""

    def _add(
        check_in: date,
        check_out: date,
        *,
        user_id: int = 1,
        hotel_id: int = 3,
        room_id: int = 7,
        number_of_rooms: int = 1,
        status: str = "pending",
        payment_status: str = "pending",
        total_price: str = "100.00",
    ) -> int:
        with engine.begin() as conn:
            result = conn.execute(
                insert(Booking).values(
                    user_id=user_id,
                    hotel_id=hotel_id,
                    room_id=room_id,
                    check_in_date=check_in,
                    check_out_date=check_out,
                    number_of_guests=1,
                    number_of_rooms=number_of_rooms,
                    status=status,
                    payment_status=payment_status,
                    total_price=Decimal(total_price),
                )
            )
            return int(result.inserted_primary_key[0])

    return _add


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def service(engine: Engine, sink: RecordingSink) -> BookingService:
    return BookingService(engine, sink, today=lambda: FIXED_TODAY)


@pytest.fixture
def app(engine: Engine, sink: RecordingSink, service: BookingService) -> FastAPI:
    app = create_app(engine=engine, notifier=sink)
    app.state.booking_service = service
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def _make_token(email: str, **claims: Any) -> str:
    return jwt.encode({"email": email, **claims}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def _auth_headers(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(email)}"}


def _gateway_headers(
    username: str | None = PAYMENT_WEBHOOK_USERNAME,
    password: str | None = PAYMENT_WEBHOOK_PASSWORD,
) -> dict[str, str]:
    credentials = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {credentials}"}


@pytest.fixture
def customer() -> Principal:
    return Principal(user_id=1, email=CUSTOMER_EMAIL, name="Alice", role=Role.CUSTOMER)


@pytest.fixture
def other_customer() -> Principal:
    return Principal(user_id=2, email=OTHER_CUSTOMER_EMAIL, name="Bob", role=Role.CUSTOMER)


@pytest.fixture
def branch_admin() -> Principal:
    return Principal(
        user_id=3,
        email=BRANCH_ADMIN_EMAIL,
        role=Role.BRANCH_ADMIN,
        assigned_hotel_ids=frozenset({3, 9}),
    )


@pytest.fixture
def super_admin() -> Principal:
    return Principal(user_id=4, email=SUPER_ADMIN_EMAIL, role=Role.SUPER_ADMIN)


@pytest.fixture
def legacy_admin() -> Principal:
    return Principal(user_id=5, email=LEGACY_ADMIN_EMAIL, role=Role.ADMIN)


@pytest.fixture
def unassigned_admin() -> Principal:
    return Principal(user_id=6, email=UNASSIGNED_ADMIN_EMAIL, role=Role.BRANCH_ADMIN)


@pytest.fixture
def make_token() -> Callable[..., str]:
    return _make_token


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Bearer headers for a seeded user's email."""
    return _auth_headers


@pytest.fixture
def gateway_headers() -> Callable[..., dict[str, str]]:
    """Basic auth headers for the payment gateway (correct credentials by default)."""
    return _gateway_headers
