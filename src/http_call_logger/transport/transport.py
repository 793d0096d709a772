"""httpx transport that reports lifecycle events of every call it carries."""

import contextlib
import ssl
from typing import Iterator, Optional, Union

import httpcore
import httpx

from .backend import EventListenerBackend, Resolver
from .tracer import CallTracer, current_tracer

# Order matters: subclasses before their bases.
_EXCEPTION_MAPPING = (
    (httpcore.ConnectTimeout, httpx.ConnectTimeout),
    (httpcore.ReadTimeout, httpx.ReadTimeout),
    (httpcore.WriteTimeout, httpx.WriteTimeout),
    (httpcore.PoolTimeout, httpx.PoolTimeout),
    (httpcore.TimeoutException, httpx.TimeoutException),
    (httpcore.ConnectError, httpx.ConnectError),
    (httpcore.ReadError, httpx.ReadError),
    (httpcore.WriteError, httpx.WriteError),
    (httpcore.NetworkError, httpx.NetworkError),
    (httpcore.ProxyError, httpx.ProxyError),
    (httpcore.UnsupportedProtocol, httpx.UnsupportedProtocol),
    (httpcore.RemoteProtocolError, httpx.RemoteProtocolError),
    (httpcore.LocalProtocolError, httpx.LocalProtocolError),
    (httpcore.ProtocolError, httpx.ProtocolError),
)


@contextlib.contextmanager
def map_httpcore_exceptions() -> Iterator[None]:
    """Re-raise httpcore exceptions as the matching httpx exceptions."""
    try:
        yield
    except Exception as exc:
        for core_exc, httpx_exc in _EXCEPTION_MAPPING:
            if isinstance(exc, core_exc):
                raise httpx_exc(str(exc)) from exc
        raise


class _CountingRequestStream:
    """Request body iterator that counts the bytes handed to httpcore."""

    def __init__(self, stream: httpx.SyncByteStream, tracer: CallTracer):
        self._stream = stream
        self._tracer = tracer

    def __iter__(self) -> Iterator[bytes]:
        for part in self._stream:
            self._tracer.request_body_bytes += len(part)
            yield part


class _ResponseStream(httpx.SyncByteStream):

    def __init__(self, stream, tracer: Optional[CallTracer]):
        self._stream = stream
        self._tracer = tracer

    def __iter__(self) -> Iterator[bytes]:
        with map_httpcore_exceptions():
            for part in self._stream:
                if self._tracer is not None:
                    self._tracer.response_body_bytes += len(part)
                yield part

    def close(self) -> None:
        if hasattr(self._stream, "close"):
            with map_httpcore_exceptions():
                self._stream.close()


class EventListenerTransport(httpx.BaseTransport):
    """
    Connection-pooling transport built on httpcore with lifecycle tracing.

    Works like ``httpx.HTTPTransport`` but connects through
    :class:`EventListenerBackend`, so calls sent by
    :class:`~http_call_logger.client.HTTPClient` get DNS and per-route
    connect events in addition to httpcore's request/response trace events.

    Args:
        verify: Verify TLS certificates (or an ``ssl.SSLContext``)
        http1: Enable HTTP/1.1
        http2: Enable HTTP/2 (requires the ``h2`` package)
        limits: Connection pool limits
        retries: Connect retries performed by httpcore
        resolver: Custom resolver, see :class:`EventListenerBackend`

    Example:
        >>> transport = EventListenerTransport(http2=True)
        >>> client = HTTPClient(call_logger.event_listener_factory(), transport=transport)
    """

    def __init__(
        self,
        verify: Union[bool, ssl.SSLContext] = True,
        http1: bool = True,
        http2: bool = False,
        limits: httpx.Limits = httpx.Limits(max_connections=100, max_keepalive_connections=20),
        retries: int = 0,
        resolver: Optional[Resolver] = None,
    ):
        if isinstance(verify, ssl.SSLContext):
            ssl_context = verify
        else:
            ssl_context = httpx.create_ssl_context(verify=verify)
        self._pool = httpcore.ConnectionPool(
            ssl_context=ssl_context,
            max_connections=limits.max_connections,
            max_keepalive_connections=limits.max_keepalive_connections,
            keepalive_expiry=limits.keepalive_expiry,
            http1=http1,
            http2=http2,
            retries=retries,
            network_backend=EventListenerBackend(resolver=resolver),
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        assert isinstance(request.stream, httpx.SyncByteStream)

        tracer = current_tracer()
        content = request.stream if tracer is None else _CountingRequestStream(request.stream, tracer)

        core_request = httpcore.Request(
            method=request.method,
            url=httpcore.URL(
                scheme=request.url.raw_scheme,
                host=request.url.raw_host,
                port=request.url.port,
                target=request.url.raw_path,
            ),
            headers=request.headers.raw,
            content=content,
            extensions=request.extensions,
        )
        with map_httpcore_exceptions():
            core_response = self._pool.handle_request(core_request)

        return httpx.Response(
            status_code=core_response.status,
            headers=core_response.headers,
            stream=_ResponseStream(core_response.stream, tracer),
            extensions=core_response.extensions,
        )

    def close(self) -> None:
        self._pool.close()
