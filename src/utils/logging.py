"""Logging configuration for the hybrid tailoring application.

Modules create their loggers with ``logging.getLogger(__name__)``, so they
live under the ``src`` package namespace. ``configure_logging`` wires that
namespace and the ``hybrid_tailor`` application logger to the same handlers.
"""

import logging
import sys
from pathlib import Path

# Application logger used by the CLI
LOGGER_NAME = "hybrid_tailor"

# Parent of every module logger
PACKAGE_LOGGER_NAME = "src"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# File written into each CLI run directory
RUN_LOG_NAME = "run.log"

_configured = False


def _managed_loggers() -> list[logging.Logger]:
    return [logging.getLogger(LOGGER_NAME), logging.getLogger(PACKAGE_LOGGER_NAME)]


def configure_logging(
    level: str | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> logging.Logger:
    """Configure the application and package loggers.

    Records go to stderr so that stdout stays free for CLI reports.
    Calling again only changes the level.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO if not specified.
        format_string: Format string for log messages.
        date_format: Format string for timestamps.

    Returns:
        The application logger.
    """
    global _configured

    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
        for logger in _managed_loggers():
            logger.handlers.clear()
            logger.addHandler(handler)
            logger.propagate = False
        _configured = True

    for logger in _managed_loggers():
        logger.setLevel(log_level)
        for handler in logger.handlers:
            handler.setLevel(log_level)

    return logging.getLogger(LOGGER_NAME)


def add_run_log(
    run_dir: Path,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> Path:
    """Also write log records to ``run.log`` inside a CLI run directory.

    Returns:
        Path of the log file.
    """
    path = run_dir / RUN_LOG_NAME
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
    handler.setLevel(logging.getLogger(LOGGER_NAME).level)
    for logger in _managed_loggers():
        logger.addHandler(handler)
    return path


def get_logger(name: str) -> logging.Logger:
    """Get a child of the application logger (``hybrid_tailor.<name>``)."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Reset logging configuration (useful for testing)."""
    global _configured

    closed: set[int] = set()
    for logger in _managed_loggers():
        for handler in logger.handlers:
            if id(handler) not in closed:
                handler.close()
                closed.add(id(handler))
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    _configured = False
