from __future__ import annotations

import sys
from typing import Optional

from loguru import logger


LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - {message}"


def setup_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default sink with a single stderr sink at ``level``.

    Safe to call more than once; each call resets the sinks.
    """
    logger.remove()
    logger.add(sys.stderr, level=(level or "INFO").upper(), format=LOG_FORMAT)
