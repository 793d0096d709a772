# src/http_call_logger/call_logger.py
"""
A logger of HTTP calls.

Plug :meth:`CallLogger.event_listener_factory` into an HTTP client to get one
line per lifecycle event of every call::

    * callStart: Request{method=GET, url=http://localhost:8080/}
    * dnsStart: localhost
    * dnsEnd: ['127.0.0.1']
    ...
    * callEnd (took 12ms)

The format of these lines is not stable and may change between releases.
If you need a stable format, write your own EventListener.
"""

import logging
import time
from typing import Callable, List, Optional, Union
from typing import Protocol as _Protocol, runtime_checkable

from .events.listener import EventListener, EventListenerFactory
from .events.models import (
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

CALLS_LOGGER_NAME = "http_call_logger.calls"


@runtime_checkable
class Logger(_Protocol):
    """Destination for formatted call log lines."""

    def log(self, message: str) -> None: ...


class PythonLogger:
    """Writes lines to a standard library logger at INFO level."""

    def __init__(self, name: str = CALLS_LOGGER_NAME, level: int = logging.INFO):
        self._logger = logging.getLogger(name)
        self._level = level

    def log(self, message: str) -> None:
        self._logger.log(self._level, message)


DEFAULT_LOGGER: Logger = PythonLogger()

Sink = Union[Logger, Callable[[str], None]]


class CallLogger:
    """
    Formats HTTP call events into single-line messages.

    Args:
        logger: Sink for log lines. Either an object with ``log(message)``
            or a plain callable taking the message. A ``logging.Logger``
            is written to at INFO. Defaults to the
            ``http_call_logger.calls`` Python logger at INFO.
        clock: Monotonic clock returning nanoseconds, used for callEnd timing.

    Example:
        >>> lines = []
        >>> call_logger = CallLogger(lines.append)
        >>> client = HTTPClient(call_logger.event_listener_factory())
    """

    def __init__(
        self,
        logger: Optional[Sink] = None,
        clock: Callable[[], int] = time.monotonic_ns,
    ):
        if logger is None:
            logger = DEFAULT_LOGGER
        elif isinstance(logger, logging.Logger):
            # logging.Logger.log takes (level, msg)
            logger = PythonLogger(logger.name)
        self._log: Callable[[str], None] = logger.log if isinstance(logger, Logger) else logger
        self._clock = clock

    def event_listener_factory(self) -> EventListenerFactory:
        """Factory that creates a fresh listener for every call."""
        return self._create

    def _create(self, call: Call) -> EventListener:
        return _CallLoggerEventListener(self._log, self._clock)


class _CallLoggerEventListener(EventListener):

    def __init__(self, log: Callable[[str], None], clock: Callable[[], int]):
        self._log = log
        self._clock = clock
        self._start_ns = 0

    def call_start(self, call: Call) -> None:
        self._start_ns = self._clock()
        self._log(f"* callStart: {call.request}")

    def dns_start(self, call: Call, domain_name: str) -> None:
        self._log(f"* dnsStart: {domain_name}")

    def dns_end(self, call: Call, domain_name: str, addresses: List[str]) -> None:
        self._log(f"* dnsEnd: {addresses}")

    def connect_start(self, call: Call, address: SocketAddress, proxy: Proxy) -> None:
        self._log(f"* connectStart: {address} {proxy}")

    def secure_connect_start(self, call: Call) -> None:
        self._log("* secureConnectStart")

    def secure_connect_end(self, call: Call, handshake: Optional[Handshake]) -> None:
        self._log("* secureConnectEnd")

    def connect_end(
        self,
        call: Call,
        address: SocketAddress,
        proxy: Proxy,
        protocol: Optional[Protocol],
    ) -> None:
        self._log(f"* connectEnd: {protocol}")

    def connect_failed(
        self,
        call: Call,
        address: SocketAddress,
        proxy: Proxy,
        protocol: Optional[Protocol],
        error: BaseException,
    ) -> None:
        self._log(f"* connectFailed: {protocol} {describe_error(error)}")

    def connection_acquired(self, call: Call, connection: Connection) -> None:
        self._log(f"* connectionAcquired: {connection}")

    def connection_released(self, call: Call, connection: Connection) -> None:
        self._log("* connectionReleased")

    def request_headers_start(self, call: Call) -> None:
        self._log("* requestHeadersStart")

    def request_headers_end(self, call: Call, request: Request) -> None:
        self._log("* requestHeadersEnd")

    def request_body_start(self, call: Call) -> None:
        self._log("* requestBodyStart")

    def request_body_end(self, call: Call, byte_count: int) -> None:
        self._log(f"* requestBodyEnd: byteCount={byte_count}")

    def response_headers_start(self, call: Call) -> None:
        self._log("* responseHeadersStart")

    def response_headers_end(self, call: Call, response: Response) -> None:
        self._log(f"* responseHeadersEnd: {response}")

    def response_body_start(self, call: Call) -> None:
        self._log("* responseBodyStart")

    def response_body_end(self, call: Call, byte_count: int) -> None:
        self._log(f"* responseBodyEnd: byteCount={byte_count}")

    def call_end(self, call: Call) -> None:
        took_ms = (self._clock() - self._start_ns) // 1_000_000
        self._log(f"* callEnd (took {took_ms}ms)")

    def call_failed(self, call: Call, error: BaseException) -> None:
        self._log(f"* callFailed: {describe_error(error)}")
