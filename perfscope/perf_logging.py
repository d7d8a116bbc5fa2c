"""Centralized logging configuration for perfscope.

Provides:
- Structured JSON logging support
- Optional rotating file output
- Per-component category loggers
- Debug context manager
"""

import json
import logging
import logging.handlers
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

LOGGER_NAME = "perfscope"


class LogCategory(Enum):
    """Log categories for per-component debugging."""

    SAMPLER = "sampler"
    AGGREGATOR = "aggregator"
    BENCHMARK = "benchmark"
    MEMORY = "memory"
    SESSION = "session"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Produces structured JSON log entries with consistent fields
    and support for extra timing context.
    """

    extra_fields = ("duration_ms", "subject", "operation", "iterations")

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string representation of the log entry.
        """
        log_entry: dict = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        for field in self.extra_fields:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(
    level: str = "INFO",
    quiet: bool = False,
    verbose: bool = False,
    log_file: Path | None = None,
    log_format: str = "text",
    rotation_count: int = 3,
    max_bytes: int = 10485760,
) -> logging.Logger:
    """Configure the perfscope logger.

    Args:
        level: Base log level (DEBUG, INFO, WARNING, ERROR).
        quiet: Suppress console output below ERROR.
        verbose: Enable debug-level console output.
        log_file: Optional file to log into, rotated by size.
        log_format: Output format for console and file ("text" or "json").
        rotation_count: Number of backup files to keep.
        max_bytes: Max file size before rotation.

    Returns:
        Configured logger instance.
    """
    import logging.config

    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"
    else:
        effective_level = level.upper()

    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {"format": "%(levelname)s | %(message)s"},
            "json": {
                "()": JSONFormatter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if log_format == "json" else "simple",
                "level": effective_level,
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            LOGGER_NAME: {
                "handlers": ["console"],
                "level": "DEBUG",
                "propagate": False,
            }
        },
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json" if log_format == "json" else "detailed",
            "level": "DEBUG",
            "filename": str(log_file),
            "maxBytes": max_bytes,
            "backupCount": rotation_count,
        }
        config["loggers"][LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)
    return logging.getLogger(LOGGER_NAME)


def get_logger() -> logging.Logger:
    """Get the package logger instance."""
    return logging.getLogger(LOGGER_NAME)


def get_category_logger(category: LogCategory) -> logging.Logger:
    """Get a logger for a specific component.

    Args:
        category: The log category (SAMPLER, BENCHMARK, etc.).

    Returns:
        Child logger of the package logger.

    Example:
        >>> logger = get_category_logger(LogCategory.BENCHMARK)
        >>> logger.debug("Trial finished")
    """
    return logging.getLogger(f"{LOGGER_NAME}.{category.value}")


@contextmanager
def debug_context(
    logger: logging.Logger | None = None,
) -> Generator[logging.Logger, None, None]:
    """Temporarily enable debug-level logging.

    Sets the logger and its handlers to DEBUG for the duration
    of the context, then restores the original levels.

    Args:
        logger: Optional logger to modify. Defaults to the package logger.

    Yields:
        The logger instance with DEBUG level enabled.
    """
    target_logger = logger or get_logger()
    original_level = target_logger.level
    original_handler_levels = [handler.level for handler in target_logger.handlers]
    try:
        target_logger.setLevel(logging.DEBUG)
        for handler in target_logger.handlers:
            handler.setLevel(logging.DEBUG)
        yield target_logger
    finally:
        target_logger.setLevel(original_level)
        for handler, level in zip(
            target_logger.handlers, original_handler_levels, strict=False
        ):
            handler.setLevel(level)


__all__ = [
    "LOGGER_NAME",
    "LogCategory",
    "JSONFormatter",
    "setup_logging",
    "get_logger",
    "get_category_logger",
    "debug_context",
]
