"""
Structured logging with structlog.

JSON lines in production, coloured console output elsewhere. Every event
carries the service name and environment, and values under credential-like
keys are masked before rendering so API keys and tokens never reach logs.
"""
import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from orderdesk.core.config import settings

REDACTED = "***"
SECRET_KEYS = frozenset({
    "api_key",
    "authorization",
    "client_secret",
    "password",
    "secret",
    "token",
})


def _is_secret(key: str) -> bool:
    key = key.lower()
    return any(marker in key for marker in SECRET_KEYS)


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key, value in event_dict.items():
        if key != "event" and value and _is_secret(key):
            event_dict[key] = REDACTED
    return event_dict


def add_service_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", "orderdesk")
    event_dict.setdefault("env", settings.environment)
    return event_dict


def configure_logging(level: Any = None) -> None:
    """Configure structlog and route stdlib logging through it."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_context,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.environment == "production":
        renderer: Processor = structlog.processors.JSONRenderer()
        processors = [*shared_processors, structlog.processors.format_exc_info, renderer]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

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
        level=level or getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    # Upstream clients log every request at INFO
    for name in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
