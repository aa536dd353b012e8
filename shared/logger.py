"""
Console logging for the resource runtime's application edge.

The HTTP adapter and the application facade log through here; library
modules use `logging.getLogger(__name__)` and leave handler setup to the
application.

Usage:
    from shared.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Message here")
"""

import logging
import sys
from typing import Dict, Optional

from shared.config import config

# Global cache of loggers
_loggers: Dict[str, logging.Logger] = {}


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record):
        # Color a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger that writes colored lines to stdout.

    Args:
        name: Logger name (typically __name__ or component name)
        level: Logging level (default: config.log_level)

    Returns:
        Configured logger instance
    """
    if name in _loggers:
        return _loggers[name]

    if level is None:
        level = config.log_level_value

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        ColoredFormatter(
            fmt='%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    )
    logger.addHandler(console_handler)

    _loggers[name] = logger
    return logger
