"""
Logging utilities for the Order Tax calculator.

All loggers hang off ``order_tax``. Log records go to stderr because the
CLI prints its tables and JSON bodies on stdout.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .config import Config

ROOT_LOGGER = "order_tax"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"


def _level_number(level: Optional[str]) -> int:
    """Map a level name to its number; unknown names fall back to INFO."""
    value = logging.getLevelName((level or "INFO").upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``order_tax`` logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file that receives the same records as stderr
        format_string: Custom format string for log messages

    Returns:
        The configured ``order_tax`` logger
    """
    level_num = _level_number(level)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level_num)
    # Repeated CLI invocations in one process must not stack handlers
    logger.handlers.clear()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setLevel(level_num)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def configure_logging(config: Config, verbose: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Set up logging at LOG_LEVEL from config, or DEBUG when verbose."""
    level = "DEBUG" if verbose else config.get("log_level", "INFO")
    return setup_logging(level=level, log_file=log_file)


def get_logger(name: str) -> logging.Logger:
    """Child of the ``order_tax`` logger for a module (usually ``__name__``)."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
