"""
Console logging setup for http-call-logger.

The package only installs a NullHandler at import. Applications either
configure the ``http_call_logger`` logger themselves or call
:func:`configure_logging`.
"""

import logging
from typing import Optional, TextIO

from .config import LoggingConfig, LogLevel
from .formatters import get_formatter
from .handlers import create_console_handler


def _get_level(level: LogLevel) -> int:
    """Convert LogLevel enum to logging level int."""
    return getattr(logging, level.value)


def configure_logging(
    config: Optional[LoggingConfig] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Replaces handlers previously installed by this function. The logger
    does not propagate to the root logger once configured.

    Args:
        config: Logging configuration (uses defaults if None)
        stream: Console stream, stdout by default

    Returns:
        The configured ``logging.Logger``

    Example:
        >>> configure_logging(LoggingConfig.create(format="colored"))
        >>> call_logger = CallLogger()  # default sink now prints to stdout
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(config.logger_name)
    reset_logging(config.logger_name)

    level = _get_level(config.level)
    logger.setLevel(level)
    logger.propagate = False

    if config.enable_console:
        handler = create_console_handler(
            level=level,
            formatter=get_formatter(config.format.value),
            stream=stream,
        )
        logger.addHandler(handler)

    return logger


def reset_logging(logger_name: str = "http_call_logger") -> None:
    """
    Flush, close and remove all non-Null handlers of a logger.

    Safe to call multiple times.
    """
    logger = logging.getLogger(logger_name)
    for handler in logger.handlers[:]:  # Copy list to avoid modification during iteration
        if isinstance(handler, logging.NullHandler):
            continue
        handler.flush()
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
