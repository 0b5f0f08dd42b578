"""
Logging configuration and utilities for the tunables package.

Every module logs below the ``tunables`` logger, so a single call to
``setup_logging`` controls the whole package.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Union
import sys

PACKAGE_LOGGER = "tunables"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_level(log_level: Union[str, int]) -> int:
    """
    Convert a level name or number to a logging level.

    Raises:
        ValueError: If the name is not one of LOG_LEVELS
    """
    if isinstance(log_level, int):
        return log_level
    name = str(log_level).strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")
    return getattr(logging, name)


def setup_logging(
    log_level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Set up logging configuration for the tunables package.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        log_file: Path to a rotating log file (optional)
        log_format: Custom log format (optional)
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup log files to keep

    Returns:
        The configured package logger
    """
    level = resolve_level(log_level)
    formatter = logging.Formatter(
        log_format or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Reconfiguring replaces earlier handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # stderr keeps tables printed on stdout clean
    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging configured at %s%s", logging.getLevelName(level),
                 f", writing to {log_file}" if log_file else "")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger nested under the package logger.

    Args:
        name: Module or class name, e.g. "finalizer"

    Returns:
        Logger named ``tunables.<name>``
    """
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


class LoggingMixin:
    """
    Mixin giving a class a logger named after the class.
    """

    @property
    def logger(self) -> logging.Logger:
        return get_logger(self.__class__.__name__)

    def log_info(self, msg: str, *args, **kwargs) -> None:
        self.logger.info(msg, *args, **kwargs)

    def log_warning(self, msg: str, *args, **kwargs) -> None:
        self.logger.warning(msg, *args, **kwargs)

    def log_error(self, msg: str, *args, **kwargs) -> None:
        self.logger.error(msg, *args, **kwargs)

    def log_debug(self, msg: str, *args, **kwargs) -> None:
        self.logger.debug(msg, *args, **kwargs)
