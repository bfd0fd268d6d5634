"""
Structured logging for the mutualmatch library.

Library loggers are structlog loggers wrapped around stdlib loggers under the
``mutualmatch`` namespace. They never touch global logging state: each event
is handed to the stdlib logger as a plain record (message plus ``extra``), so
whatever handlers the host application installed decide where it goes.
Standalone use (``main.py``) can opt into a rendering handler with
`configure_logging`.
"""

import logging
import sys
from typing import IO, Any, Dict, Optional

import structlog
from structlog.types import Processor

from mutualmatch.config import get_settings

LIBRARY_LOGGER = "mutualmatch"

_LOGGER_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.render_to_log_kwargs,
]


def configure_logging(stream: Optional[IO[str]] = None) -> logging.Handler:
    """
    Attach a structlog-rendering handler to the ``mutualmatch`` logger.

    Only the library's own logger namespace is changed; the root logger and
    structlog's global configuration are left alone. Uses `ConsoleRenderer` in
    development and `JSONRenderer` everywhere else. Calling it again replaces
    the handler installed by the previous call.

    Args:
        stream (Optional[IO[str]]): Where to write; defaults to stdout.

    Returns:
        logging.Handler: The installed handler.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.ENVIRONMENT.lower() == "development":
        renderer: Processor = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(LIBRARY_LOGGER)
    handler.setFormatter(formatter)

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for existing in list(library_logger.handlers):
        if existing.get_name() == LIBRARY_LOGGER:
            library_logger.removeHandler(existing)
    library_logger.addHandler(handler)
    library_logger.setLevel(log_level)
    library_logger.propagate = False
    return handler


def get_logger(name: str, **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger with the given name and initial values.

    Context bound through ``structlog.contextvars`` is merged into every event.

    Args:
        name (str): Logger name (usually `__name__`).
        **initial_values: Key-value pairs to initially bind to the logger context.

    Returns:
        structlog.stdlib.BoundLogger: A structured logger writing to the stdlib logger `name`.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_LOGGER_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    ).bind(**initial_values)


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    message: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log an error with structured context.

    Extracts the error type and message, and the `details` mapping carried by
    library exceptions.

    Args:
        logger (structlog.stdlib.BoundLogger): The logger instance to use.
        error (Exception): The exception to log.
        message (Optional[str], optional): Custom message. Defaults to "An error occurred".
        extra (Optional[Dict[str, Any]], optional): Additional context to log.
    """
    context = dict(extra or {})
    context["error_type"] = error.__class__.__name__
    context["error_message"] = str(error)

    if hasattr(error, "details"):
        context["error_details"] = error.details

    logger.error(message or "An error occurred", **context, exc_info=error)
