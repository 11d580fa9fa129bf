"""
Logging Utility

Every module gets its logger from create_logger(__name__). Handlers live on
the package root logger and are installed once by configure_logging().
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

ROOT_LOGGER_NAME = "cryptoalert"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def create_logger(name: str) -> logging.Logger:
    """
    Create a module logger under the package root logger.

    Args:
        name: Usually __name__ of the calling module

    Returns:
        logging.Logger: Logger that propagates to the configured handlers
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_path: Optional[str] = None) -> logging.Logger:
    """
    Install stream and rotating file handlers on the package root logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Log level name (e.g., "INFO")
        log_path: File to write to; None disables file logging

    Returns:
        logging.Logger: The package root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_path:
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=3)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
