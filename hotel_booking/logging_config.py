from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, cast

import structlog

from hotel_booking.config import LOG_FORMAT, LOG_LEVEL, SERVICE_NAME

# Type alias for structlog processor
Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]


def add_service_name(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Tag every event with the service name so shared log indexes can be filtered."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging() -> None:
    """
    Configure stdlib logging and structlog for the booking service.

    LOG_FORMAT=json (default) emits one JSON object per event with exceptions
    rendered into the `exception` key; LOG_FORMAT=console prints colored,
    human-readable lines for local development. Request-scoped fields bound by
    `RequestIDMiddleware` (request_id, method, path, user_id, role) are merged
    into every event.
    """
    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=LOG_LEVEL,
    )

    for noisy_logger in ["urllib3", "requests", "sqlalchemy.engine", "uvicorn.access"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if LOG_FORMAT == "console":
        processors.append(cast(Processor, structlog.dev.ConsoleRenderer(colors=True)))
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(cast(Processor, structlog.processors.JSONRenderer()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
