"""Ambient configuration: logging setup and environment settings."""

from .logging import LoggingConfig, LogFormat, LogLevel, configure_logging, reset_logging
from .settings import (
    CallLoggerSettings,
    load_client_kwargs_from_env,
    load_logging_config_from_env,
)

__all__ = [
    "LoggingConfig",
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "reset_logging",
    "CallLoggerSettings",
    "load_client_kwargs_from_env",
    "load_logging_config_from_env",
]
