"""UTC datetime utilities."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    Used for created_at/updated_at so every timestamp written by the service
    is timezone-aware and in UTC.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def today() -> date:
    """Return the current UTC calendar date (the booking service's default clock)."""
    return utc_now().date()
