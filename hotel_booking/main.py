# hotel_booking/main.py

from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from hotel_booking.config import ALLOWED_ORIGINS, NOTIFICATION_WEBHOOK_URL
from hotel_booking.db.engine import create_db_engine
from hotel_booking.errors import register_exception_handlers
from hotel_booking.logging_config import setup_logging
from hotel_booking.middleware import RequestIDMiddleware
from hotel_booking.routes.bookings import router as bookings_router
from hotel_booking.routes.health import router as health_router
from hotel_booking.routes.metrics import router as metrics_router
from hotel_booking.routes.payments import router as payments_router
from hotel_booking.routes.rooms import router as rooms_router
from hotel_booking.services.bookings import BookingService
from hotel_booking.services.notifications import (
    DatabaseNotificationSink,
    NotificationSink,
    WebhookNotificationSink,
)

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)


def build_notifier(engine: Engine) -> NotificationSink:
    """Webhook delivery when NOTIFICATION_WEBHOOK_URL is set, in-app rows otherwise."""
    if NOTIFICATION_WEBHOOK_URL:
        return WebhookNotificationSink(NOTIFICATION_WEBHOOK_URL)
    return DatabaseNotificationSink(engine)


def attach_engine(
    app: FastAPI, engine: Engine, notifier: Optional[NotificationSink] = None
) -> None:
    """Wire the engine and the booking service built on it into app.state."""
    app.state.engine = engine
    app.state.booking_service = BookingService(engine, notifier or build_notifier(engine))


def create_app(
    engine: Optional[Engine] = None, notifier: Optional[NotificationSink] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        engine: Engine to serve from; when None one is created from
            DATABASE_URL at startup and disposed at shutdown
        notifier: Notification sink override

    Returns:
        FastAPI: Configured application
    """
    app = FastAPI(
        title="Hotel Booking API",
        description="Booking, availability and pricing core for hotel branches",
        version="1.0.0",
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Register routers
    app.include_router(health_router, tags=["Health"])
    app.include_router(metrics_router, tags=["Metrics"])
    app.include_router(bookings_router, prefix="/api", tags=["Bookings"])
    app.include_router(rooms_router, prefix="/api", tags=["Rooms"])
    app.include_router(payments_router, prefix="/api", tags=["Payments"])

    app.state.owns_engine = False
    if engine is not None:
        attach_engine(app, engine, notifier)

    @app.on_event("startup")
    def startup_event() -> None:
        """Create the engine unless one was injected."""
        logger.info("FastAPI application starting up...")

        if getattr(app.state, "engine", None) is None:
            attach_engine(app, create_db_engine(), notifier)
            app.state.owns_engine = True

        logger.info("FastAPI application initialized")

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        if app.state.owns_engine:
            app.state.engine.dispose()
            logger.info("database_engine_disposed")

    return app


app = create_app()
