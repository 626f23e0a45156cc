"""
Logging Configuration for the Recurring-Revenue Analytics Engine

Every module logs through structlog. configure_logging() installs one stdlib
handler that renders both structlog events and foreign records (uvicorn,
multipart parsing) as JSON lines or colored console output.
"""

import logging
import sys
from typing import IO, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from arr_analytics.config.settings import get_settings

# Server loggers that share our handler instead of their own
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Per-part upload parsing is too chatty below WARNING
QUIET_LOGGERS = ("python_multipart", "multipart")


def _renderer(log_format: str):
    if log_format == "json":
        return JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure structured logging for the API or a script.

    Args:
        log_level: Override the configured level (DEBUG, INFO, WARNING, ERROR)
        log_format: Override the configured format ("json" or "text")
        stream: Output stream; stdout unless given (scripts pass stderr
            when their own output goes to stdout)
    """
    monitoring = get_settings().monitoring
    level = (log_level or monitoring.log_level).upper()
    log_format = log_format or monitoring.log_format
    numeric_level = getattr(logging, level, logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(ProcessorFormatter(
        processor=_renderer(log_format),
        foreign_pre_chain=shared_processors,
    ))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    for name in ROUTED_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True
        server_logger.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level,
        format=log_format,
    )
