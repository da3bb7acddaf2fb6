"""
Centralized logging configuration for the NSE converter.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the converter should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    # structlog does the formatting, stdlib only routes
    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s",
        force=True
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

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


def get_conversion_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound to the conversion subsystem.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger carrying the conversion subsystem context
    """
    return structlog.get_logger(name, subsystem="conversion")


def get_data_quality_logger(name: str) -> FilteringBoundLogger:
    """Get a logger for data-quality findings that do not stop the run."""
    return structlog.get_logger(
        name,
        subsystem="data_quality",
        audit_trail=True
    )


def log_file_converted(
    logger: FilteringBoundLogger,
    symbol: str,
    source_path: str,
    bar_count: int,
    processed: int,
    total: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log per-file conversion progress with a standardized format.

    Args:
        logger: Structlog logger instance
        symbol: Canonical symbol written
        source_path: Vendor file the bars came from
        bar_count: Number of bars written for the file
        processed: Files processed so far, including this one
        total: Total files enumerated for the run
        context: Additional context data
    """
    bound_logger = logger.bind(
        symbol=symbol,
        source_path=source_path,
        bar_count=bar_count,
        progress=f"{processed}/{total}",
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("File converted")
