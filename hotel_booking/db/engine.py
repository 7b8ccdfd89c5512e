"""
SQLAlchemy engine construction with production-ready connection pooling.

The engine is created once by the application at startup (see
`hotel_booking.main`) and disposed at shutdown; nothing here holds a
module-level connection pool.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url

from hotel_booking.config import DATABASE_URL


def create_db_engine(url: Optional[str] = None, **overrides: Any) -> Engine:
    """
    Build an engine for the given URL (defaults to DATABASE_URL).

    Server databases get a sized, pre-pinged, recycled pool. SQLite keeps
    SQLAlchemy's defaults since its pool classes reject sizing options.

    Raises:
        RuntimeError: If no URL is given and DATABASE_URL is not set
    """
    url = url or DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")

    options: dict[str, Any] = {"future": True, "echo": False}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(
            pool_size=10,  # Number of connections to maintain in the pool
            max_overflow=20,  # Additional connections when pool is exhausted
            pool_pre_ping=True,  # Detect stale connections before use
            pool_recycle=3600,  # Recycle connections after 1 hour
        )
    options.update(overrides)
    return create_engine(url, **options)


def check_engine_health(engine: Engine) -> bool:
    """
    Check if database engine is healthy and connections are working.

    Used by the /ready endpoint before the service accepts traffic.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
