# src/http_call_logger/client.py
import logging
import ssl
from typing import Any, Dict, Optional, Union

import httpx

from .events.listener import EventListener, EventListenerFactory
from .events.models import Call, Protocol, Request, Response
from .transport.backend import Resolver
from .transport.tracer import CallTracer, activate
from .transport.transport import EventListenerTransport

logger = logging.getLogger(__name__)


def summarize_request(request: httpx.Request) -> Request:
    """Build the request summary shown in callStart lines."""
    return Request(method=request.method, url=str(request.url))


def summarize_response(response: httpx.Response) -> Response:
    """Build the response summary shown in responseHeadersEnd lines."""
    return Response(
        protocol=Protocol.parse(response.http_version),
        code=response.status_code,
        message=response.reason_phrase,
        url=str(response.url),
    )


class HTTPClient:
    """
    Synchronous HTTP client that reports every call to an event listener.

    A fresh listener is created through ``event_listener_factory`` for each
    call, so listeners may keep per-call state (timers, counters).

    Example:
        >>> from http_call_logger import CallLogger, HTTPClient
        >>>
        >>> call_logger = CallLogger(print)
        >>> with HTTPClient(call_logger.event_listener_factory()) as client:
        ...     response = client.get("https://example.com/")
        * callStart: Request{method=GET, url=https://example.com/}
        * dnsStart: example.com
        ...
        * callEnd (took 87ms)
    """

    def __init__(
        self,
        event_listener_factory: Optional[EventListenerFactory] = None,
        *,
        base_url: str = "",
        timeout: Union[float, httpx.Timeout] = 30.0,
        headers: Optional[Dict[str, str]] = None,
        verify: Union[bool, ssl.SSLContext] = True,
        http2: bool = False,
        resolver: Optional[Resolver] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            event_listener_factory: Creates one listener per call.
                Defaults to a factory returning ``EventListener.NONE``.
            base_url: Base URL prepended to relative request URLs
            timeout: Timeout in seconds or ``httpx.Timeout``
            headers: Default headers for every request
            verify: Verify TLS certificates, or an ``ssl.SSLContext`` to use as is
            http2: Enable HTTP/2 (requires ``h2``)
            resolver: Custom DNS resolver ``(host, port) -> [ip, ...]``
            transport: Transport to use instead of :class:`EventListenerTransport`.
                Only EventListenerTransport reports connection-level events.
        """
        self._event_listener_factory = event_listener_factory or EventListener.factory(
            EventListener.NONE
        )
        if transport is None:
            transport = EventListenerTransport(verify=verify, http2=http2, resolver=resolver)
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
            trust_env=False,
        )

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close pooled connections."""
        self._client.close()

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Execute a call and return its fully read response.

        Args:
            method: HTTP method
            url: Absolute URL or path relative to ``base_url``
            **kwargs: Passed to ``httpx.Client.build_request``
                (params, headers, content, json, data, files, ...)

        Returns:
            httpx.Response with the body already read

        Raises:
            httpx.HTTPError: If the call fails. The listener sees ``call_failed``
                first and the exception is re-raised unchanged.
        """
        request = self._client.build_request(method, url, **kwargs)
        call = Call(request=summarize_request(request))
        listener = self._event_listener_factory(call)
        tracer = CallTracer(listener, call, request)
        request.extensions["trace"] = tracer

        with activate(tracer):
            listener.call_start(call)
            try:
                response = self._client.send(request, stream=True)
            except httpx.HTTPError as exc:
                logger.debug("Call %s failed before response: %s", call.call_id, exc)
                listener.call_failed(call, exc)
                raise

            try:
                listener.response_headers_end(call, summarize_response(response))
                response.read()
            except httpx.HTTPError as exc:
                response.close()
                logger.debug("Call %s failed while reading response: %s", call.call_id, exc)
                listener.call_failed(call, exc)
                raise
            except Exception:
                response.close()
                raise

            listener.call_end(call)
        return response

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("HEAD", url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("OPTIONS", url, **kwargs)

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)
