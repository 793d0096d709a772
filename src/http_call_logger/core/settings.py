"""
Configuration from environment variables and .env files.

Priority (highest to lowest):
1. **overrides - explicit parameters
2. Environment variables (HTTP_CALL_LOGGER_*)
3. .env file
4. Defaults

Example .env file:
    HTTP_CALL_LOGGER_LOG_LEVEL=INFO
    HTTP_CALL_LOGGER_LOG_FORMAT=colored
    HTTP_CALL_LOGGER_TIMEOUT=10
    HTTP_CALL_LOGGER_VERIFY_SSL=true
"""

from typing import Any, Dict, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging.config import LoggingConfig


class CallLoggerSettings(BaseSettings):
    """
    Validated settings read from the environment.

    Usage:
        >>> settings = CallLoggerSettings()
        >>> settings.log_level
        'INFO'
    """

    model_config = SettingsConfigDict(
        env_prefix='HTTP_CALL_LOGGER_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)

    # Client
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    http2: bool = Field(default=False, description="Enable HTTP/2")


def load_logging_config_from_env(
    env_file: Optional[str] = None,
    **overrides: Any,
) -> LoggingConfig:
    """
    Build LoggingConfig from the environment.

    Args:
        env_file: Custom .env file path
        **overrides: log_level, log_format, log_enable_console

    Raises:
        pydantic.ValidationError: If an environment value is invalid
    """
    settings = _load_settings(env_file)
    return LoggingConfig.create(
        level=overrides.get('log_level', settings.log_level),
        format=overrides.get('log_format', settings.log_format),
        enable_console=overrides.get('log_enable_console', settings.log_enable_console),
    )


def load_client_kwargs_from_env(
    env_file: Optional[str] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    """
    Build keyword arguments for :class:`~http_call_logger.client.HTTPClient`.

    Example:
        >>> client = HTTPClient(factory, **load_client_kwargs_from_env())
    """
    settings = _load_settings(env_file)
    return {
        'timeout': overrides.get('timeout', settings.timeout),
        'verify': overrides.get('verify_ssl', settings.verify_ssl),
        'http2': overrides.get('http2', settings.http2),
    }


def _load_settings(env_file: Optional[str]) -> CallLoggerSettings:
    if env_file is None:
        return CallLoggerSettings()
    return CallLoggerSettings(_env_file=env_file)
