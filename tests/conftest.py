"""
Pytest configuration and fixtures for http-call-logger tests.
"""

import re
import ssl
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import List

import pytest
import trustme

from http_call_logger import CallLogger, HTTPClient
from http_call_logger.core.logging import reset_logging


class LogRecorder:
    """
    Sink that records call log lines and checks them in order.

    Example:
        recorder.expect("* dnsStart: localhost").expect_match(r"\\* callEnd .*")
        recorder.expect_no_more()
    """

    def __init__(self):
        self.lines: List[str] = []
        self._index = 0
        self._lock = threading.Lock()

    def log(self, message: str) -> None:
        with self._lock:
            self.lines.append(message)

    def _next(self) -> str:
        assert self._index < len(self.lines), f"No more messages found, got {self.lines}"
        line = self.lines[self._index]
        self._index += 1
        return line

    def expect(self, expected: str) -> "LogRecorder":
        actual = self._next()
        assert actual == expected
        return self

    def expect_match(self, pattern: str) -> "LogRecorder":
        actual = self._next()
        assert re.fullmatch(pattern, actual), f"<{actual}> did not match pattern <{pattern}>"
        return self

    def expect_no_more(self) -> None:
        remaining = self.lines[self._index:]
        assert not remaining, f"More messages remain: {remaining}"

    def events(self) -> List[str]:
        """Event names of all recorded lines, e.g. ['callStart', 'dnsStart']."""
        return [re.match(r"\* (\w+)", line).group(1) for line in self.lines]


class _Server(ThreadingHTTPServer):
    # Keep-alive handler threads stay blocked until the client closes its pool
    block_on_close = False


class _Handler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_GET(self):
        body = b"Hello!"
        self.send_response(200)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        self.rfile.read(length)
        self.send_response(200)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):
        pass


@pytest.fixture
def recorder():
    """Log line recorder used as CallLogger sink."""
    return LogRecorder()


@pytest.fixture
def call_logger(recorder):
    """CallLogger writing into the recorder."""
    return CallLogger(recorder)


def _serve(server: _Server):
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def http_server():
    """Local HTTP/1.1 server on 127.0.0.1, answers GET with 'Hello!'."""
    yield from _serve(_Server(("127.0.0.1", 0), _Handler))


@pytest.fixture(scope="session")
def cert_authority():
    """Throwaway CA issuing the test server certificate."""
    return trustme.CA()


@pytest.fixture
def https_server(cert_authority):
    """Same server as http_server behind TLS, certificate valid for localhost."""
    server_context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    cert_authority.issue_cert("localhost", "127.0.0.1").configure_cert(server_context)
    server = _Server(("127.0.0.1", 0), _Handler)
    server.socket = server_context.wrap_socket(server.socket, server_side=True)
    yield from _serve(server)


@pytest.fixture
def client_ssl_context(cert_authority):
    """Client context trusting cert_authority."""
    context = ssl.create_default_context()
    cert_authority.configure_trust(context)
    return context


@pytest.fixture
def server_port(http_server):
    return http_server.server_address[1]


@pytest.fixture
def base_url(server_port):
    """Base URL of the local server, using a name that needs resolving."""
    return f"http://localhost:{server_port}"


@pytest.fixture
def loopback_resolver():
    """Resolver mapping every host to 127.0.0.1 only."""
    return lambda host, port: ["127.0.0.1"]


@pytest.fixture
def client(call_logger, loopback_resolver):
    """HTTP client reporting to the recorder."""
    client = HTTPClient(
        call_logger.event_listener_factory(),
        timeout=5,
        resolver=loopback_resolver,
    )
    yield client
    client.close()


@pytest.fixture
def clean_logging():
    """Restore the package logger after tests that configure it."""
    yield
    reset_logging("http_call_logger")
