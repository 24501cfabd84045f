"""Process-level loguru configuration."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"
_CONFIGURED = False


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Replace loguru's default sink with exactly one sink.

    The terminal frontend owns stdout, so it logs to a file; the server logs
    to stderr (log_file=None).
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger.remove()
    if log_file is not None:
        logger.add(
            log_file,
            level=level.upper(),
            format=_FORMAT,
            backtrace=False,
            diagnose=False,
            rotation="5 MB",
        )
    else:
        logger.add(
            sys.stderr,
            level=level.upper(),
            format=_FORMAT,
            backtrace=False,
            diagnose=False,
        )
    _CONFIGURED = True
