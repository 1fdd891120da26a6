"""Structured logging configuration for buildprep.

Provides dual output strategy:
- console.print() for user-facing CLI output (Rich formatting)
- logging module for diagnostics (structured, filterable)

Usage:
    from buildprep.logging import get_logger
    logger = get_logger(__name__)
    logger.debug("Resolved path: %s", path)

Resolver functions take an optional ``logger`` argument; use
``component_logger(logger, _logger)`` to fall back to the module logger.

Log level:
    - CLI flag: buildprep --debug
    - Environment: BUILDPREP_DEBUG=1, or BUILDPREP_LOG_LEVEL=INFO|DEBUG|...
"""

from __future__ import annotations

import logging
import os
import sys

from .constants import DEBUG_ENV_VAR, LOG_LEVEL_ENV_VAR, LOGGER_NAMESPACE

_loggers: dict[str, logging.Logger] = {}
_initialized = False

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = logging.WARNING


def _get_log_level() -> int:
    """Determine log level from environment.

    BUILDPREP_DEBUG wins over BUILDPREP_LOG_LEVEL; unknown level names are ignored.
    """
    if os.environ.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes"):
        return logging.DEBUG
    name = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip().upper()
    level = logging.getLevelName(name) if name else None
    return level if isinstance(level, int) else DEFAULT_LEVEL


def _formatter(level: int) -> logging.Formatter:
    fmt = LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT
    return logging.Formatter(fmt, datefmt=DATE_FORMAT)


def _init_logging() -> None:
    """Attach the stderr handler to the buildprep root logger (once)."""
    global _initialized
    if _initialized:
        return

    level = _get_log_level()
    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.setLevel(level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(_formatter(level))
        root_logger.addHandler(handler)

    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger in the buildprep namespace.

    Args:
        name: Module name (typically __name__).
    """
    _init_logging()

    if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
        name = f"{LOGGER_NAMESPACE}.{name}"

    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)

    return _loggers[name]


def component_logger(logger: logging.Logger | None, default: logging.Logger) -> logging.Logger:
    """Injected logger if given, else the module default."""
    return logger if logger is not None else default


def set_debug(enabled: bool = True) -> None:
    """Enable debug logging, or go back to the level from the environment.

    Called by CLI when --debug flag is used.
    """
    _init_logging()
    level = logging.DEBUG if enabled else _get_log_level()
    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.setLevel(level)

    for handler in root_logger.handlers:
        handler.setLevel(level)
        handler.setFormatter(_formatter(level))
