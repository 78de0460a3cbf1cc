"""Logging configuration for alint-lsp."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAMESPACE = "alintlsp"

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(*, level: str = "INFO", log_file: Path | None = None) -> None:
    """
    Configure the alint-lsp logger tree.

    stdout carries the LSP stream in stdio mode, so records go either to
    ``log_file`` or to stderr, never to stdout.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs to stderr.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(log_level)
    logger.handlers.clear()

    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT))
    handler.setLevel(log_level)
    logger.addHandler(handler)

    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the alintlsp namespace.

    Args:
        name: Dotted logger name, e.g. ``"lint.retry"``.

    Returns:
        Logger named ``alintlsp.<name>``.
    """
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
