"""Structured logging for DSCommerce.

Wraps structlog on top of the standard library so that both structlog loggers
and third-party stdlib loggers (uvicorn, sqlalchemy) share one pipeline.

Usage:
    from dscommerce.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("order_created", order_id=order.id, items=len(order.items))

Request-scoped values (correlation id, principal id) are bound with
set_context() and flow into every log line emitted while handling the request.
"""

import logging
import sys
from typing import Any, Optional

import structlog

_CONFIGURED = False

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
]


def configure_logging(
    level: str = "INFO",
    format: str = "human",
    file: Optional[str] = None,
) -> None:
    """Configure structlog and the root stdlib logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: "human" for colored console output, "json" for JSON lines
        file: Optional path of a file that receives the same output
    """
    global _CONFIGURED

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file:
        handlers.append(logging.FileHandler(file))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level.upper())

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)


def set_context(**values: Any) -> None:
    """Bind request-scoped values to every subsequent log line."""
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    """Drop all request-scoped logging values."""
    structlog.contextvars.clear_contextvars()
