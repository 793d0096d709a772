"""
Logging setup for http-call-logger.

Example:
    >>> from http_call_logger.core.logging import LoggingConfig, configure_logging
    >>>
    >>> configure_logging(LoggingConfig.create(level="INFO", format="colored"))
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import configure_logging, reset_logging
from .formatters import TextFormatter, ColoredFormatter, get_formatter
from .handlers import create_console_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "configure_logging",
    "reset_logging",
    # Formatters
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Handlers
    "create_console_handler",
]
