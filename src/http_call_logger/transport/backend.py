"""Network backend reporting DNS and connect attempts to the current call."""

import logging
import socket
from typing import Any, Callable, Iterable, List, Optional

import httpcore

from ..events.models import NO_PROXY, SocketAddress
from .tracer import TracedStream, current_tracer

logger = logging.getLogger(__name__)

Resolver = Callable[[str, int], List[str]]


def resolve(host: str, port: int) -> List[str]:
    """
    Resolve ``host`` with the system resolver.

    Returns:
        IP addresses in resolver order, without duplicates

    Raises:
        OSError: If the name cannot be resolved
    """
    addresses: List[str] = []
    for _, _, _, _, sockaddr in socket.getaddrinfo(host, port, type=socket.SOCK_STREAM):
        ip = str(sockaddr[0])
        if ip not in addresses:
            addresses.append(ip)
    return addresses


class EventListenerBackend(httpcore.NetworkBackend):
    """
    httpcore network backend that resolves and connects route by route.

    Each resolved address is tried in order until one accepts the
    connection. DNS and every connect attempt are reported to the listener
    of the call running in the current context. Outside of a traced call
    it behaves like the wrapped backend.

    Args:
        resolver: ``(host, port) -> [ip, ...]``, defaults to :func:`resolve`
        backend: Backend doing the actual socket work
    """

    def __init__(
        self,
        resolver: Optional[Resolver] = None,
        backend: Optional[httpcore.NetworkBackend] = None,
    ):
        self._resolver = resolver or resolve
        self._backend = backend or httpcore.SyncBackend()

    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        local_address: Optional[str] = None,
        socket_options: Optional[Iterable[Any]] = None,
    ) -> httpcore.NetworkStream:
        tracer = current_tracer()
        if tracer is None:
            return self._backend.connect_tcp(
                host,
                port,
                timeout=timeout,
                local_address=local_address,
                socket_options=socket_options,
            )

        listener, call = tracer.listener, tracer.call
        listener.dns_start(call, host)
        try:
            addresses = self._resolver(host, port)
        except (OSError, UnicodeError) as exc:
            # IDNA encoding failures surface as UnicodeError, not OSError
            raise httpcore.ConnectError(str(exc)) from exc
        listener.dns_end(call, host, addresses)
        if not addresses:
            raise httpcore.ConnectError(f"No addresses found for {host}")

        last_error: Optional[Exception] = None
        for ip in addresses:
            address = SocketAddress(host, ip, port)
            tracer.current_address = address
            listener.connect_start(call, address, NO_PROXY)
            try:
                stream = self._backend.connect_tcp(
                    ip,
                    port,
                    timeout=timeout,
                    local_address=local_address,
                    socket_options=socket_options,
                )
                return TracedStream(stream, address)
            except (httpcore.ConnectError, httpcore.ConnectTimeout) as exc:
                logger.debug("Connect to %s failed: %s", address, exc)
                listener.connect_failed(call, address, NO_PROXY, None, exc)
                last_error = exc

        assert last_error is not None
        raise last_error

    def connect_unix_socket(
        self,
        path: str,
        timeout: Optional[float] = None,
        socket_options: Optional[Iterable[Any]] = None,
    ) -> httpcore.NetworkStream:
        return self._backend.connect_unix_socket(
            path, timeout=timeout, socket_options=socket_options
        )

    def sleep(self, seconds: float) -> None:
        self._backend.sleep(seconds)
