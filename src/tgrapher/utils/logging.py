"""
Logging setup for tgrapher.

Modules ask for a logger and nothing else:
    ```python
    from tgrapher.utils.logging import get_logger
    logger = get_logger(__name__)
    ```

Only the command line entry point (or a script driving tgrapher) attaches a
handler, with ``configure_logging(level="DEBUG")``. Records go to stderr; the
graph summary and cut listings are program output on stdout, not log records.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "tgrapher"
LOG_LEVEL_ENV = "TGRAPHER_LOG_LEVEL"

DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Optional[Union[str, int]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _stderr_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            return handler
    return None


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """Send ``tgrapher`` log records to stderr. The root logger is left alone.

    Args:
        level: Level name or number; TGRAPHER_LOG_LEVEL (default INFO) when None.
        fmt: Record format, DEFAULT_FMT when None.
        datefmt: Timestamp format, DEFAULT_DATEFMT when None.
        force: Drop existing handlers first. Otherwise a second call only
            changes the level of the stderr handler already attached.
    """
    numeric_level = _resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    if force:
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
    else:
        existing = _stderr_handler(logger)
        if existing is not None:
            existing.setLevel(numeric_level)
            return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt=fmt or DEFAULT_FMT, datefmt=datefmt or DEFAULT_DATEFMT))
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger called name, or the package logger when name is None."""
    return logging.getLogger(name or LOGGER_NAME)
