"""Event listener base class for HTTP call lifecycle events."""

from typing import Callable, ClassVar, List, Optional

from .models import (
    Call,
    Connection,
    Handshake,
    Protocol,
    Proxy,
    Request,
    Response,
    SocketAddress,
)


class EventListener:
    """Receives lifecycle events of a single HTTP call.

    Every hook is a no-op by default, override only what you need.
    A new listener is created for each call through an
    :data:`EventListenerFactory`, so subclasses may keep per-call state.

    Events for a successful plaintext call arrive in this order::

        call_start
        dns_start, dns_end
        connect_start, connect_end
        connection_acquired
        request_headers_start, request_headers_end
        [request_body_start, request_body_end]
        response_headers_start, response_headers_end
        response_body_start, response_body_end
        connection_released
        call_end

    TLS connections add ``secure_connect_start``/``secure_connect_end``
    between ``connect_start`` and ``connect_end``. A failing call ends with
    ``call_failed`` instead of ``call_end``.

    Example:
        class CountingListener(EventListener):
            def __init__(self):
                self.events = 0

            def request_headers_start(self, call: Call) -> None:
                self.events += 1
    """

    NONE: ClassVar["EventListener"]

    def call_start(self, call: Call) -> None:
        pass

    def dns_start(self, call: Call, domain_name: str) -> None:
        pass

    def dns_end(self, call: Call, domain_name: str, addresses: List[str]) -> None:
        pass

    def connect_start(self, call: Call, address: SocketAddress, proxy: Proxy) -> None:
        pass

    def secure_connect_start(self, call: Call) -> None:
        pass

    def secure_connect_end(self, call: Call, handshake: Optional[Handshake]) -> None:
        pass

    def connect_end(
        self,
        call: Call,
        address: SocketAddress,
        proxy: Proxy,
        protocol: Optional[Protocol],
    ) -> None:
        pass

    def connect_failed(
        self,
        call: Call,
        address: SocketAddress,
        proxy: Proxy,
        protocol: Optional[Protocol],
        error: BaseException,
    ) -> None:
        pass

    def connection_acquired(self, call: Call, connection: Connection) -> None:
        pass

    def connection_released(self, call: Call, connection: Connection) -> None:
        pass

    def request_headers_start(self, call: Call) -> None:
        pass

    def request_headers_end(self, call: Call, request: Request) -> None:
        pass

    def request_body_start(self, call: Call) -> None:
        pass

    def request_body_end(self, call: Call, byte_count: int) -> None:
        pass

    def response_headers_start(self, call: Call) -> None:
        pass

    def response_headers_end(self, call: Call, response: Response) -> None:
        pass

    def response_body_start(self, call: Call) -> None:
        pass

    def response_body_end(self, call: Call, byte_count: int) -> None:
        pass

    def call_end(self, call: Call) -> None:
        pass

    def call_failed(self, call: Call, error: BaseException) -> None:
        pass

    @staticmethod
    def factory(listener: "EventListener") -> "EventListenerFactory":
        """
        Build a factory that hands out the same listener for every call.

        Only suitable for listeners without per-call state.
        """
        return lambda call: listener


EventListener.NONE = EventListener()

EventListenerFactory = Callable[[Call], EventListener]
