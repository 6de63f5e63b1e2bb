"""
Centralized logging for Snowfall.

Records up to INFO go to stdout, WARNING and above to stderr, so service
managers can tell normal chatter from problems. Level comes from LOG_LEVEL.
"""

import logging
import sys
from typing import TextIO

from snowfall.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LevelFilter(logging.Filter):
    """Pass only records whose level lies in [level_min, level_max]."""

    def __init__(self, level_min: int, level_max: int):
        super().__init__()
        self.level_min = level_min
        self.level_max = level_max

    def filter(self, record: logging.LogRecord) -> bool:
        return self.level_min <= record.levelno <= self.level_max


def _handler(stream: TextIO, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str = LOG_LEVEL,
    out: TextIO = sys.stdout,
    err: TextIO = sys.stderr,
) -> logging.Logger:
    """
    (Re)configure the "snowfall" logger.

    Safe to call repeatedly: existing handlers are replaced.

    Args:
        level: Logger level name (DEBUG, INFO, WARNING, ERROR)
        out: Stream for DEBUG/INFO records
        err: Stream for WARNING and above
    """
    configured = logging.getLogger("snowfall")
    configured.setLevel(level)
    configured.propagate = False
    configured.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    chatter = _handler(out, logging.DEBUG, formatter)
    chatter.addFilter(LevelFilter(logging.DEBUG, logging.INFO))
    configured.addHandler(chatter)
    configured.addHandler(_handler(err, logging.WARNING, formatter))

    return configured


# Global logger instance
logger = setup_logging()
