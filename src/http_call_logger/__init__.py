"""HTTP Call Logger - one log line per lifecycle event of every HTTP call."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .call_logger import CallLogger, Logger, PythonLogger, DEFAULT_LOGGER
from .client import HTTPClient
from .events import (
    Call,
    Connection,
    EventListener,
    EventListenerFactory,
    Handshake,
    Protocol,
    Proxy,
    Request,
    Response,
    SocketAddress,
)
from .transport import EventListenerBackend, EventListenerTransport
from .core.logging import LoggingConfig, configure_logging

# Set up logging - add NullHandler to prevent "No handler found" warnings
# Users can configure logging themselves using logging.getLogger('http_call_logger')
logging.getLogger('http_call_logger').addHandler(logging.NullHandler())

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    __version__ = version("http-call-logger")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Logger
    "CallLogger",
    "Logger",
    "PythonLogger",
    "DEFAULT_LOGGER",

    # Client
    "HTTPClient",
    "EventListenerTransport",
    "EventListenerBackend",

    # Events
    "EventListener",
    "EventListenerFactory",
    "Call",
    "Connection",
    "Handshake",
    "Protocol",
    "Proxy",
    "Request",
    "Response",
    "SocketAddress",

    # Logging
    "LoggingConfig",
    "configure_logging",

    # Version
    "__version__",
]
