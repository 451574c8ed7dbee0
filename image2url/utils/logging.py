"""structlog setup.

stdout carries the MCP stdio protocol, so every log line goes to stderr.
"""

import logging
import sys

import structlog

from ..config.settings import Settings


def configure_logging(settings: Settings) -> None:
    """Route structlog through stdlib logging on stderr."""
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
