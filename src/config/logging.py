"""
structlog setup for Tillbook.

Events are rendered for the console in development and as JSON lines in
staging and production. Request-scoped fields bound through
structlog.contextvars (request_id, method, path) are merged into every event.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from src.config.settings import get_settings

# Libraries that log too much at INFO
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def _renderer(json_logs: bool) -> list[Processor]:
    if json_logs:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(json_logs: bool | None = None) -> None:
    """Install the processor chain; json_logs=None picks by environment."""
    settings = get_settings()
    if json_logs is None:
        json_logs = settings.environment != "development"

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        *_renderer(json_logs),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=settings.log_level,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
