"""Centralized logging configuration using loguru.

Provides:
- Level selection from Settings with --verbose/--quiet overrides
- A console sink that shows the pipeline context (batch, post) of each record
- Optional rotating file sink with the full bound context
- Standard library interception (pipeline modules, httpx, httpcore)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Bound extras rendered on the console, in display order
CONSOLE_CONTEXT_KEYS = ("batch", "item")

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {extra} | {message}"

_configured = False


class InterceptHandler(logging.Handler):
    """Route standard library log records into loguru.

    Pipeline modules log through ``logging.getLogger(__name__)``; this
    handler is what makes those records reach the loguru sinks.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Forward one stdlib record to loguru."""
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _console_format(record: Record) -> str:
    """Build the console template for one record.

    Records bound with ``get_logger`` show their bound name; intercepted
    stdlib records show their module. Batch and post context, when bound,
    follow in brackets.
    """
    extra = record["extra"]
    source = "{extra[name]}" if "name" in extra else "{name}"
    context = "".join(f" [{key} {{extra[{key}]}}]" for key in CONSOLE_CONTEXT_KEYS if key in extra)
    return (
        "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
        f"<cyan>{source}</cyan>{context} - <level>{{message}}</level>\n{{exception}}"
    )


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Configure logging for the application.

    Args:
        level: Base log level from config
        verbose: If True, use DEBUG level (overrides level and quiet)
        quiet: If True, use WARNING level (overrides level)
        log_file: Optional path for file logging with rotation
        rotation: When to rotate the log file (e.g., "10 MB", "1 day")
        retention: How long to keep rotated logs
        serialize: If True, write JSON lines to the log file

    Returns:
        Configured logger instance
    """
    global _configured

    effective_level: LogLevel = "DEBUG" if verbose else "WARNING" if quiet else level

    logger.remove()
    logger.add(
        sys.stderr,
        level=effective_level,
        format=_console_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        # The file always captures everything, independent of the console level
        logger.add(
            log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    _intercept_stdlib_logging(effective_level)

    _configured = True
    return logger


def _intercept_stdlib_logging(level: LogLevel) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # httpx logs every request at INFO; only show it when debugging
    transport_level = logging.DEBUG if level in ("TRACE", "DEBUG") else logging.WARNING
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(transport_level)


def get_logger(name: str) -> Logger:
    """Get a logger with the given name bound as context.

    Usage:
        from post_audit.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Loaded {} items", count)
    """
    return logger.bind(name=name)


def bind_item(item_id: str) -> Logger:
    """Logger carrying the id of the post being evaluated."""
    return logger.bind(name="audit", item=item_id)


def bind_batch(batch_number: int, total_batches: int) -> Logger:
    """Logger carrying the batch position as ``n/total`` (1-based)."""
    return logger.bind(name="audit", batch=f"{batch_number}/{total_batches}")


class LogContext:
    """Bind context to every record logged inside a ``with`` block.

    Unlike ``bind``, the context also reaches records emitted by code that
    holds its own logger, including intercepted stdlib records.

    Usage:
        with LogContext(archive="data/tweets.js"):
            await scheduler.run()
    """

    def __init__(self, **context: Any) -> None:
        self._manager = logger.contextualize(**context)

    def __enter__(self) -> Logger:
        self._manager.__enter__()
        return logger

    def __exit__(self, *exc_info: Any) -> None:
        self._manager.__exit__(*exc_info)


def is_configured() -> bool:
    """Check if setup_logging has run."""
    return _configured


def reset_logging() -> None:
    """Remove all sinks (used by tests)."""
    global _configured
    logger.remove()
    _configured = False
