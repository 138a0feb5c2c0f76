"""Logging utilities for designsync commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "designsync"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the designsync hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, level: str | None = None, log_file: Path | None = None
) -> logging.Logger:
    """Configure the designsync logger with console output and optional file sink."""
    resolved = logging.DEBUG if verbose else _level_from_name(level)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(resolved)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(resolved)
    stream_handler.setFormatter(logging.Formatter("[designsync] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(resolved)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def _level_from_name(level: str | None) -> int:
    if not level:
        return logging.INFO
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


__all__ = ["configure_logging", "get_logger"]
