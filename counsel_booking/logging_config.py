"""Structured logging configuration.

Purpose: JSON-formatted logs where every backend call carries its request ID.

Pattern: structlog with standard library integration.
"""
import logging
import sys
import uuid

import structlog

from counsel_booking import config


def setup_structured_logging(log_level: str = None, json_output: bool = True):
    """
    Configure structured logging for the client.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Defaults to COUNSEL_LOG_LEVEL.
        json_output: Render JSON lines; False gives the console renderer
    """
    level = (log_level or config.LOG_LEVEL).upper()
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get logger instance with structured logging.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Generate unique request ID."""
    return f"req-{uuid.uuid4().hex[:12]}"


def request_context(request_id: str):
    """Bind a request ID to every log line emitted inside the block."""
    return structlog.contextvars.bound_contextvars(request_id=request_id)
