"""
Centralized logging configuration for the SSA Forecasting System

Every module logs through a child of the ``ssa_forecaster`` logger, so one
call to setup_logging() (done at import time) or set_log_level() controls
training, evaluation and checkpoint output together.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from decouple import config

ROOT_LOGGER_NAME = 'ssa_forecaster'

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level(log_level) -> int:
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def setup_logging(
    log_level: str = None,
    log_file: str = None,
    enable_console: bool = True,
    format_string: str = None
) -> logging.Logger:
    """
    Configure the ``ssa_forecaster`` logger hierarchy

    Args:
        log_level: Logging level name; defaults to the LOG_LEVEL setting
        log_file: Optional log file; defaults to the LOG_FILE setting. The file
                  is rotated once it reaches LOG_MAX_BYTES
        enable_console: Whether to log to stdout
        format_string: Format for log records; defaults to the LOG_FORMAT setting

    Returns:
        The configured root logger of the forecasting system
    """
    level = _resolve_level(log_level or config('LOG_LEVEL', default='INFO'))
    log_file = log_file or config('LOG_FILE', default=None)
    formatter = logging.Formatter(format_string or config('LOG_FORMAT', default=DEFAULT_FORMAT))

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Re-running setup replaces handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config('LOG_MAX_BYTES', default=5 * 1024 * 1024, cast=int),
            backupCount=config('LOG_BACKUP_COUNT', default=3, cast=int)
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def set_log_level(log_level) -> None:
    """Change the level of the forecasting loggers and their handlers at runtime"""
    level = _resolve_level(log_level)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance for a specific module

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
    return logging.getLogger(ROOT_LOGGER_NAME)


# Initialize default logger
default_logger = setup_logging()
