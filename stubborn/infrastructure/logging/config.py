"""
Structured logging setup.

Applications embedding stubborn call ``configure_logging`` once at startup;
libraries should leave structlog configuration to their host.
"""

import logging
import sys
import structlog

from stubborn.infrastructure.logging.sanitization import StructlogSanitizer


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog with request sanitization.

    Args:
        level: Minimum log level name
        json_logs: Render JSON lines instead of the console format
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=getattr(logging, level.upper(), logging.INFO))

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            StructlogSanitizer(),
            renderer
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
