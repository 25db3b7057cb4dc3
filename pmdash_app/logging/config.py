"""
Centralized logging configuration for the PMDash system.

This module provides standardized logging configuration using structlog
for all components. Refresh ticks and order book feed handling each get a
dedicated bound logger so their records can be filtered by subsystem.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _base_processors() -> list:
    """Processors shared by console and JSON output, in chain order."""
    return [
        # Drop records below the stdlib logger's level before any rendering work
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        # Scheduler failures log with exc_info; render the traceback into the record
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog over stdlib logging for the whole package.

    Call once at startup, before schedulers start; module loggers are lazy
    proxies and pick up this configuration on first use.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL), any case
        format_json: Render one JSON object per line instead of console output
        include_timestamp: Add an ISO8601 ``timestamp`` key
        include_caller: Add ``filename`` and ``lineno`` keys
        extra_processors: Processors inserted just before the renderer

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    log_level = _LEVELS.get(level.upper())
    if log_level is None:
        raise ValueError(f"Unknown log level: {level!r}")

    # Records are fully rendered by structlog; stdlib only routes them to stdout
    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s")

    processors = _base_processors()

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    # Renderer must stay last
    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_refresh_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to the refresh scheduler subsystem."""
    return structlog.get_logger(name, subsystem="refresh")


def get_book_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to the order book subsystem."""
    return structlog.get_logger(name, subsystem="orderbook")


def log_tick_outcome(
    logger: FilteringBoundLogger,
    series: str,
    phase: str,
    generation: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of one refresh tick with standardized format.

    Args:
        logger: Structlog logger instance
        series: Name of the refreshed data series
        phase: Terminal phase of the tick ("succeeded", "failed", "discarded")
        generation: Fetch generation the outcome belongs to
        context: Additional context data
    """
    bound_logger = logger.bind(
        series=series,
        phase=phase,
        generation=generation,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if phase == "failed":
        bound_logger.warning("Refresh tick failed")
    elif phase == "discarded":
        bound_logger.info("Refresh result discarded")
    else:
        bound_logger.debug("Refresh tick succeeded")
