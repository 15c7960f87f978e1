"""
loguru sinks: JSON lines inside Lambda, colored console output elsewhere.
"""

import os
import sys
from typing import Optional

from loguru import logger

__all__ = ["logger", "setup_logging"]

_SILENT = {"0", "OFF", "NONE", "SILENT"}
_ALIASES = {"1": "INFO", "2": "DEBUG"}

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}:{line}</cyan> | <level>{message}</level>"
)


def _resolve_level(raw: Optional[str]) -> Optional[str]:
    """Map LOG_LEVEL to a loguru level name, or None when logging is off."""
    level = (raw or "INFO").strip().upper()
    if level in _SILENT:
        return None
    return _ALIASES.get(level, level)


def setup_logging() -> None:
    logger.remove()

    level = _resolve_level(os.getenv("LOG_LEVEL"))
    if level is None:
        return

    if os.getenv("AWS_LAMBDA_FUNCTION_NAME"):
        # diagnose=False: tracebacks must not dump locals such as Datadog keys
        logger.add(sys.stdout, level=level, serialize=True, backtrace=False, diagnose=False)
    else:
        logger.add(sys.stdout, level=level, format=_CONSOLE_FORMAT, colorize=True, diagnose=True)
