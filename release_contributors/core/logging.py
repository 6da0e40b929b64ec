"""Structured logging setup.

Development runs get colourised console output; production runs emit one JSON
object per line so the logs can be shipped and queried.

Usage:
    from release_contributors.core.logging import setup_logging

    setup_logging()
    logger = structlog.get_logger()
    logger.info("Refreshing release cache", prefetch=5)
"""

import logging
import sys

import structlog

from release_contributors.core.config import settings


def setup_logging(environment: str | None = None, log_level: str | None = None) -> None:
    """Configure structlog and the standard library logging it sits on."""
    env = environment or settings.environment
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO through the standard library
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
