"""structlog configuration shared by the API and the client."""

import logging

import structlog

from .config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog processors, level and renderer.

    JSON lines in production or when LOG_FORMAT=json, a console renderer
    otherwise. Context bound with ``structlog.contextvars`` (the request id)
    is merged into every event.
    """
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.is_production or settings.LOG_FORMAT.lower() == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer formats exc_info itself
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
