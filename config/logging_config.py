"""
Centralized logging configuration.

Every module asks for its logger here instead of calling print().
"""
import logging
import logging.handlers
import os
from pathlib import Path
from .constants import (
    LOG_LEVEL, LOG_FORMAT, LOG_FILE,
    LOG_MAX_SIZE_MB, LOG_BACKUP_COUNT
)

ROOT_LOGGER_NAME = 'article_translator'


def _configure_root() -> logging.Logger:
    """Attach handlers once to the package root logger."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        return root

    level_name = os.getenv('LOG_LEVEL', LOG_LEVEL).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    root.propagate = False

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    log_file = os.getenv('LOG_FILE', LOG_FILE)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_SIZE_MB * 1024 * 1024,
            backupCount=LOG_BACKUP_COUNT
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    return root


def setup_logger(name: str = None) -> logging.Logger:
    """
    Get a logger that lives under the package root logger.

    Usage:
        from config.logging_config import setup_logger
        logger = setup_logger(__name__)
        logger.info("Message here")

    Args:
        name: Logger name (usually __name__). If None, the root logger.

    Returns:
        Configured logging.Logger instance.
    """
    root = _configure_root()
    if not name or name == ROOT_LOGGER_NAME:
        return root
    return root.getChild(name)


def get_logger(name: str = None) -> logging.Logger:
    """Alias for setup_logger for convenience."""
    return setup_logger(name)


logger = setup_logger()
