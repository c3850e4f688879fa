"""Logging setup shared by the engine CLI and the support session."""

from __future__ import annotations

import logging
import sys


def setup_logging(
    level: int | str = logging.INFO,
    module_name: str = "src",
) -> logging.Logger:
    """Configure and return the package logger with consistent formatting.

    Module loggers (``logging.getLogger(__name__)``) under ``src.*``
    propagate to this one, so calling it once at an entry point is enough.

    Args:
        level: Logging level or level name (default INFO).
        module_name: Name for the logger instance.

    Returns:
        Configured logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(module_name)

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
