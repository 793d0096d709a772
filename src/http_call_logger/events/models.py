"""
Value types passed to event listener callbacks.

The ``str()`` form of each type is what ends up embedded in log lines.
It is meant for humans and may change between releases.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Protocol(str, Enum):
    """Negotiated application protocol."""
    HTTP_1_0 = "http/1.0"
    HTTP_1_1 = "http/1.1"
    HTTP_2 = "h2"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Protocol"]:
        """
        Map an ALPN id or an HTTP version string to a Protocol.

        Args:
            value: e.g. "h2", "http/1.1", "HTTP/1.1", "HTTP/2"

        Returns:
            Matching Protocol or None if value is empty/unknown
        """
        if not value:
            return None
        normalized = value.lower()
        if normalized in ("h2", "http/2", "http/2.0"):
            return cls.HTTP_2
        if normalized == "http/1.0":
            return cls.HTTP_1_0
        if normalized == "http/1.1":
            return cls.HTTP_1_1
        return None


@dataclass(frozen=True)
class Proxy:
    """Proxy used for a connection attempt. ``kind`` is DIRECT or HTTP."""

    kind: str = "DIRECT"
    address: Optional[str] = None

    def __str__(self) -> str:
        if self.address is None:
            return self.kind
        return f"{self.kind} @ {self.address}"


NO_PROXY = Proxy()


@dataclass(frozen=True)
class SocketAddress:
    """A resolved address for a host, e.g. ``localhost/127.0.0.1:8080``."""

    host: str
    address: str
    port: int

    def __str__(self) -> str:
        ip = f"[{self.address}]" if ":" in self.address else self.address
        return f"{self.host}/{ip}:{self.port}"


@dataclass(frozen=True)
class Handshake:
    """Outcome of a TLS handshake."""

    tls_version: Optional[str] = None
    cipher_suite: Optional[str] = None

    def __str__(self) -> str:
        return f"Handshake{{tlsVersion={self.tls_version} cipherSuite={self.cipher_suite}}}"


@dataclass(frozen=True)
class Request:
    """Request summary."""

    method: str
    url: str

    def __str__(self) -> str:
        return f"Request{{method={self.method}, url={self.url}}}"


@dataclass(frozen=True)
class Response:
    """Response summary."""

    protocol: Optional[Protocol]
    code: int
    message: str
    url: str

    def __str__(self) -> str:
        return (
            f"Response{{protocol={self.protocol}, code={self.code}, "
            f"message={self.message}, url={self.url}}}"
        )


@dataclass(frozen=True)
class Connection:
    """Summary of the connection carrying a call."""

    host: str
    port: int
    proxy: Proxy = NO_PROXY
    host_address: Optional[SocketAddress] = None
    handshake: Optional[Handshake] = None
    protocol: Optional[Protocol] = None

    def __str__(self) -> str:
        host_address = self.host_address if self.host_address is not None else self.host
        cipher_suite = "none"
        if self.handshake is not None and self.handshake.cipher_suite:
            cipher_suite = self.handshake.cipher_suite
        return (
            f"Connection{{{self.host}:{self.port}, proxy={self.proxy} "
            f"hostAddress={host_address} cipherSuite={cipher_suite} "
            f"protocol={self.protocol}}}"
        )


@dataclass
class Call:
    """
    A single request/response exchange as seen by listeners.

    Attributes:
        request: Summary of the request that started the call
        call_id: Unique identifier for this call
    """

    request: Request
    call_id: str = field(default_factory=lambda: str(uuid.uuid4()))


def describe_error(error: BaseException) -> str:
    """
    Render an error the way it appears in log lines.

    Example:
        >>> describe_error(OSError("reason"))
        'OSError: reason'
    """
    message = str(error)
    name = type(error).__name__
    if not message:
        return name
    return f"{name}: {message}"
