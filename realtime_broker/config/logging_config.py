"""
Logging setup for the realtime broker.

The broker logs through one named logger. ``configure_logging`` attaches a
stdout handler and, when the log directory is writable, a size-rotated file
handler. Uvicorn's own loggers are pointed at the same handlers so request and
relay logs end up interleaved in one place.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from realtime_broker.config.constants import LOGGER_NAME

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "realtime_broker.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

SERVER_LOGGERS = ("uvicorn", "uvicorn.error")


def resolve_level(level: Optional[str] = None) -> int:
    """Level name from the argument or LOG_LEVEL, falling back to INFO."""
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def _rotating_file_handler(log_dir: Path) -> RotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=MAX_LOG_SIZE,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )


def configure_logging(level: Optional[str] = None, log_dir: Optional[str] = None):
    """
    Build the broker logger, replacing any handlers from an earlier call.

    Args:
        level: Level name; defaults to the LOG_LEVEL env var
        log_dir: Directory for the rotating log file; defaults to LOG_DIR or ./logs

    Returns:
        logging.Logger: The configured broker logger
    """
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    file_error = None
    try:
        handlers.append(_rotating_file_handler(Path(log_dir or os.getenv("LOG_DIR") or "logs")))
    except OSError as e:
        file_error = e

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(level))
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = list(handlers)
        server_logger.propagate = False

    if file_error is not None:
        logger.warning(f"Console logging only, file handler unavailable: {file_error}")
    logger.info(f"Logging configured at {logging.getLevelName(logger.level)}")
    return logger
