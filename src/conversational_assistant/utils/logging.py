import sys

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a single stderr sink at 'level'."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
