"""
Logging configuration for http-call-logger.

Controls where the package's Python loggers (including the default call
log sink) write their output.
"""

from dataclasses import dataclass
from enum import Enum


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Configuration for http-call-logger console logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (text, colored)
        enable_console: Enable console (stdout) logging
        logger_name: Logger to configure. Call lines are written to
            ``http_call_logger.calls``, a child of the default.

    Example:
        >>> config = LoggingConfig.create(level="INFO", format="colored")
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    logger_name: str = "http_call_logger"

    @classmethod
    def create(
        cls,
        level: str = "INFO",
        format: str = "text",
        enable_console: bool = True,
        logger_name: str = "http_call_logger",
    ) -> "LoggingConfig":
        """
        Create LoggingConfig with string values.

        Args:
            level: Log level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            format: Log format as string (text, colored)
            enable_console: Enable console logging
            logger_name: Logger to configure

        Returns:
            LoggingConfig instance

        Raises:
            ValueError: If level or format is unknown
        """
        return cls(
            level=LogLevel(level.upper()),
            format=LogFormat(format.lower()),
            enable_console=enable_console,
            logger_name=logger_name,
        )
