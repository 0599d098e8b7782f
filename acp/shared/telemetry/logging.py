"""Logging configuration for hosts embedding acp."""

import logging
import sys

from acp.core.config import get_settings


def setup_logging() -> None:
    """Configure logging for the acp logger hierarchy.

    Level is DEBUG when settings.debug is True (cache HIT/MISS lines),
    otherwise INFO (invalidations and store errors). Output goes to stdout.
    """
    settings = get_settings()
    logger = logging.getLogger("acp")
    logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)

