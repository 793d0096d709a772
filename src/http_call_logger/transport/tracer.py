"""
Translate httpcore ``trace`` extension events into listener callbacks.

httpcore reports progress through a per-request ``trace`` callback with
event names like ``http11.send_request_headers.started``. A CallTracer is
that callback for one call: it keeps the little bit of per-call state
needed to fill in connection summaries and forwards each event to the
call's EventListener.

Pooled connections outlive calls, so what a connection summary needs
(resolved route, TLS handshake) is kept on the connection's
:class:`TracedStream` instead of the tracer.
"""

import logging
import ssl
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

import httpcore
import httpx

from ..events.listener import EventListener
from ..events.models import (
    NO_PROXY,
    Call,
    Connection,
    Handshake,
    Protocol,
    SocketAddress,
)

logger = logging.getLogger(__name__)

_current_tracer: ContextVar[Optional["CallTracer"]] = ContextVar(
    "http_call_logger_tracer", default=None
)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def current_tracer() -> Optional["CallTracer"]:
    """Tracer of the call running in the current context, if any."""
    return _current_tracer.get()


@contextmanager
def activate(tracer: "CallTracer") -> Iterator["CallTracer"]:
    """Make ``tracer`` visible to the network backend for the duration of a call."""
    token = _current_tracer.set(tracer)
    try:
        yield tracer
    finally:
        _current_tracer.reset(token)


class TracedStream(httpcore.NetworkStream):
    """
    Network stream remembering the route and handshake it was opened with.

    Every write tells the current call's tracer which connection carries
    it, so a call on a reused connection still gets the right summary.

    Attributes:
        address: Route the socket was connected to
        handshake: TLS handshake, None for plaintext
        protocol: Protocol negotiated during TLS (ALPN), None for plaintext
    """

    def __init__(
        self,
        stream: httpcore.NetworkStream,
        address: SocketAddress,
        handshake: Optional[Handshake] = None,
        protocol: Optional[Protocol] = None,
    ):
        self._stream = stream
        self.address = address
        self.handshake = handshake
        self.protocol = protocol

    def read(self, max_bytes: int, timeout: Optional[float] = None) -> bytes:
        return self._stream.read(max_bytes, timeout=timeout)

    def write(self, buffer: bytes, timeout: Optional[float] = None) -> None:
        tracer = current_tracer()
        if tracer is not None:
            tracer.stream_used(self)
        self._stream.write(buffer, timeout=timeout)

    def close(self) -> None:
        self._stream.close()

    def start_tls(
        self,
        ssl_context: ssl.SSLContext,
        server_hostname: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> httpcore.NetworkStream:
        stream = self._stream.start_tls(
            ssl_context, server_hostname=server_hostname, timeout=timeout
        )
        return TracedStream(stream, self.address)

    def get_extra_info(self, info: str) -> Any:
        return self._stream.get_extra_info(info)


class CallTracer:
    """
    httpcore trace callback bound to a single call.

    Attributes:
        listener: Listener receiving the call's events
        call: The call being traced
        current_address: Address of the latest connect attempt, set by the backend
        request_body_bytes: Request body bytes streamed so far
        response_body_bytes: Response body bytes read so far
    """

    def __init__(self, listener: EventListener, call: Call, request: httpx.Request):
        self.listener = listener
        self.call = call
        self.current_address: Optional[SocketAddress] = None
        self.request_body_bytes = 0
        self.response_body_bytes = 0

        url = request.url
        self._host = url.host
        self._port = url.port or _DEFAULT_PORTS.get(url.scheme, 80)
        self._secure = url.scheme == "https"
        self._has_body = (
            "content-length" in request.headers or "transfer-encoding" in request.headers
        )
        self._handshake: Optional[Handshake] = None
        self._connection: Optional[Connection] = None
        # Protocol of the pending acquisition, set between headers start and first write
        self._acquiring: Optional[Protocol] = None

    def __call__(self, event_name: str, info: Dict[str, Any]) -> None:
        parts = event_name.rsplit(".", 2)
        if len(parts) != 3:
            return
        prefix, step, phase = parts
        handler = getattr(self, f"_on_{step}_{phase}", None)
        if handler is None:
            logger.debug("Ignoring trace event %s", event_name)
            return
        handler(prefix, info)

    def stream_used(self, stream: TracedStream) -> None:
        """Called by a TracedStream before it writes on behalf of this call."""
        if self._acquiring is None:
            return
        self._acquired(
            Connection(
                host=self._host,
                port=self._port,
                proxy=NO_PROXY,
                host_address=stream.address,
                handshake=stream.handshake,
                protocol=self._acquiring,
            )
        )

    def _acquired(self, connection: Connection) -> None:
        self._acquiring = None
        self._connection = connection
        self.listener.connection_acquired(self.call, connection)
        self.listener.request_headers_start(self.call)

    # Connection setup

    def _address(self) -> SocketAddress:
        if self.current_address is None:
            return SocketAddress(self._host, self._host, self._port)
        return self.current_address

    def _on_connect_tcp_complete(self, prefix: str, info: Dict[str, Any]) -> None:
        if not self._secure:
            self.listener.connect_end(self.call, self._address(), NO_PROXY, Protocol.HTTP_1_1)

    def _on_start_tls_started(self, prefix: str, info: Dict[str, Any]) -> None:
        self.listener.secure_connect_start(self.call)

    def _on_start_tls_complete(self, prefix: str, info: Dict[str, Any]) -> None:
        protocol = Protocol.HTTP_1_1
        stream = info.get("return_value")
        ssl_object = stream.get_extra_info("ssl_object") if stream is not None else None
        if ssl_object is not None:
            cipher = ssl_object.cipher()
            self._handshake = Handshake(
                tls_version=ssl_object.version(),
                cipher_suite=cipher[0] if cipher else None,
            )
            protocol = Protocol.parse(ssl_object.selected_alpn_protocol()) or Protocol.HTTP_1_1
        if isinstance(stream, TracedStream):
            stream.handshake = self._handshake
            stream.protocol = protocol
        self.listener.secure_connect_end(self.call, self._handshake)
        self.listener.connect_end(self.call, self._address(), NO_PROXY, protocol)

    def _on_start_tls_failed(self, prefix: str, info: Dict[str, Any]) -> None:
        self.listener.connect_failed(
            self.call, self._address(), NO_PROXY, None, info["exception"]
        )

    # Request

    def _on_send_request_headers_started(self, prefix: str, info: Dict[str, Any]) -> None:
        # Announced on the first write, once the carrying stream is known
        self._acquiring = Protocol.HTTP_2 if prefix == "http2" else Protocol.HTTP_1_1

    def _on_send_request_headers_complete(self, prefix: str, info: Dict[str, Any]) -> None:
        if self._acquiring is not None:
            self._acquired(
                Connection(
                    host=self._host,
                    port=self._port,
                    proxy=NO_PROXY,
                    host_address=self.current_address,
                    handshake=self._handshake,
                    protocol=self._acquiring,
                )
            )
        self.listener.request_headers_end(self.call, self.call.request)

    def _on_send_request_body_started(self, prefix: str, info: Dict[str, Any]) -> None:
        if self._has_body:
            self.listener.request_body_start(self.call)

    def _on_send_request_body_complete(self, prefix: str, info: Dict[str, Any]) -> None:
        if self._has_body:
            self.listener.request_body_end(self.call, self.request_body_bytes)

    # Response

    def _on_receive_response_headers_started(self, prefix: str, info: Dict[str, Any]) -> None:
        self.listener.response_headers_start(self.call)

    def _on_receive_response_body_started(self, prefix: str, info: Dict[str, Any]) -> None:
        self.listener.response_body_start(self.call)

    def _on_receive_response_body_complete(self, prefix: str, info: Dict[str, Any]) -> None:
        self.listener.response_body_end(self.call, self.response_body_bytes)

    def _on_response_closed_complete(self, prefix: str, info: Dict[str, Any]) -> None:
        connection = self._connection or Connection(host=self._host, port=self._port)
        self.listener.connection_released(self.call, connection)
