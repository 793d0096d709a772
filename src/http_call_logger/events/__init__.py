"""HTTP call lifecycle events: listener contract and value types."""

from .listener import EventListener, EventListenerFactory
from .models import (
    NO_PROXY,
    Call,
    Connection,
    Handshake,
    Protocol,
    Proxy,
    Request,
    Response,
    SocketAddress,
    describe_error,
)

__all__ = [
    "EventListener",
    "EventListenerFactory",
    "NO_PROXY",
    "Call",
    "Connection",
    "Handshake",
    "Protocol",
    "Proxy",
    "Request",
    "Response",
    "SocketAddress",
    "describe_error",
]
