"""
Logging configuration module for the car manager service.

Configures structlog once for the whole process and provides helpers for
binding a request ID to every log line emitted while a request is handled.
"""

import logging
import sys
from typing import Optional
from uuid import uuid4

import structlog


def setup_logging(
    log_level: str = "INFO",
    service_name: str = "car-manager",
    use_json: bool = False,
) -> None:
    """
    Configure application logging with structured format.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Name of the service, bound to every log entry
        use_json: Render JSON lines instead of human-readable console output
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name for the logger (typically __name__ of the module)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name or "car-manager")


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind a request ID to the logging context.

    Args:
        request_id: Request ID to bind, generates new UUID if None

    Returns:
        The request ID that was bound
    """
    if request_id is None:
        request_id = str(uuid4())
    structlog.contextvars.bind_contextvars(request_id=request_id)
    return request_id


def get_request_id() -> Optional[str]:
    """Return the request ID bound to the current context, if any."""
    return structlog.contextvars.get_contextvars().get("request_id")


def clear_request_id() -> None:
    """Remove the request ID from the logging context."""
    structlog.contextvars.unbind_contextvars("request_id")
