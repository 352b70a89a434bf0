from __future__ import annotations

import sys
from typing import Optional

from loguru import logger

from .config import LOG_LEVEL

_LOGURU_LEVELS = {
    "TRACE",
    "DEBUG",
    "INFO",
    "SUCCESS",
    "WARNING",
    "ERROR",
    "CRITICAL",
}


def init_logging(level: Optional[str] = None) -> str:
    """
    Reset Loguru to a single stderr sink. Unknown levels fall back to INFO.

    Returns the effective level.
    """
    candidate = (level or LOG_LEVEL).upper()
    effective = candidate if candidate in _LOGURU_LEVELS else "INFO"

    logger.remove()
    logger.add(
        sys.stderr,
        level=effective,
        format="<level>{level:7}</level> | <level>{message}</level>",
        backtrace=False,
        diagnose=False,
    )
    logger.debug(f"Loguru initialized at level: {effective}")
    return effective
