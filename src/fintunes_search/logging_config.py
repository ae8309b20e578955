"""Logging configuration for fintunes-search."""

import sys
from pathlib import Path

from loguru import logger

# Debounce and staleness decisions are only readable with sub-second times.
_DEBUG_FORMAT = "{time:HH:mm:ss.SSS} {level.icon} {name}: {message}"
_INFO_FORMAT = "{level.icon} {message}"


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Send logs to stderr, and to ``log_file`` at DEBUG level when given."""
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format=_DEBUG_FORMAT)
    else:
        logger.add(sys.stderr, level="INFO", format=_INFO_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level="DEBUG", format=_DEBUG_FORMAT, rotation="1 MB", retention=3)
