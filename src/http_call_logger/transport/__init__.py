"""httpx/httpcore binding that turns real HTTP calls into lifecycle events."""

from .backend import EventListenerBackend, Resolver, resolve
from .tracer import CallTracer, TracedStream, activate, current_tracer
from .transport import EventListenerTransport, map_httpcore_exceptions

__all__ = [
    "EventListenerBackend",
    "EventListenerTransport",
    "CallTracer",
    "TracedStream",
    "Resolver",
    "activate",
    "current_tracer",
    "map_httpcore_exceptions",
    "resolve",
]
