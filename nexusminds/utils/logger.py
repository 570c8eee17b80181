"""Application logging.

Everything logs through the ``nexusminds`` logger or one of its children
(``nexusminds.orchestrator``, ``nexusminds.broadcaster``, ...). Only the
parent carries handlers: a console stream and, when configured, a
size-rotated log file.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import List, Optional


APP_LOGGER_NAME = "nexusminds"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


def _parse_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _build_handlers(
    log_file: Optional[str],
    max_bytes: int,
    backup_count: int
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        ))

    return handlers


def setup_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    reset: bool = False
) -> logging.Logger:
    """
    Configure a logger with console output and an optional rotating file.

    A logger that already has handlers keeps them unless ``reset`` is set,
    so repeated calls never duplicate output.

    Args:
        name: Logger name
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL); unknown names mean INFO
        log_file: Optional path to the log file, its directory is created on demand
        max_bytes: Rotate the log file once it reaches this size
        backup_count: Rotated files to keep
        reset: Drop existing handlers first

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    level = _parse_level(log_level)
    logger.setLevel(level)

    if reset:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _build_handlers(log_file, max_bytes, backup_count):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


_app_logger: Optional[logging.Logger] = None


def init_app_logger(settings) -> logging.Logger:
    """
    (Re)configure the application logger from settings.

    Modules may already have fetched the logger with console-only defaults
    at import time; their handlers are replaced here.

    Args:
        settings: Application settings instance

    Returns:
        Configured application logger
    """
    global _app_logger

    _app_logger = setup_logger(
        name=APP_LOGGER_NAME,
        log_level=settings.log_level,
        log_file=settings.log_file,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
        reset=True
    )
    return _app_logger


def get_app_logger(component: Optional[str] = None) -> logging.Logger:
    """
    Get the application logger, or the child logger for one component.

    Falls back to a console-only configuration until init_app_logger() runs.
    """
    logger = _app_logger or setup_logger(APP_LOGGER_NAME)
    return logger.getChild(component) if component else logger
