"""
Integration tests: real HTTP calls against a local server, logged by CallLogger.
"""

import socket
import threading

import httpx
import pytest

from http_call_logger import CallLogger, EventListener, HTTPClient


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestSuccessfulCalls:

    def test_get(self, client, recorder, base_url, server_port):
        response = client.get(f"{base_url}/")

        assert response.status_code == 200
        assert response.text == "Hello!"
        (recorder
            .expect(f"* callStart: Request{{method=GET, url={base_url}/}}")
            .expect("* dnsStart: localhost")
            .expect("* dnsEnd: ['127.0.0.1']")
            .expect(f"* connectStart: localhost/127.0.0.1:{server_port} DIRECT")
            .expect("* connectEnd: http/1.1")
            .expect(
                f"* connectionAcquired: Connection{{localhost:{server_port}, proxy=DIRECT "
                f"hostAddress=localhost/127.0.0.1:{server_port} cipherSuite=none "
                f"protocol=http/1.1}}"
            )
            .expect("* requestHeadersStart")
            .expect("* requestHeadersEnd")
            .expect("* responseHeadersStart")
            .expect(
                f"* responseHeadersEnd: Response{{protocol=http/1.1, code=200, "
                f"message=OK, url={base_url}/}}"
            )
            .expect("* responseBodyStart")
            .expect("* responseBodyEnd: byteCount=6")
            .expect("* connectionReleased")
            .expect_match(r"\* callEnd \(took \d+ms\)")
            .expect_no_more())

    def test_post(self, client, recorder, base_url):
        response = client.post(f"{base_url}/", content=b"Hello!")

        assert response.status_code == 200
        assert recorder.events() == [
            "callStart",
            "dnsStart",
            "dnsEnd",
            "connectStart",
            "connectEnd",
            "connectionAcquired",
            "requestHeadersStart",
            "requestHeadersEnd",
            "requestBodyStart",
            "requestBodyEnd",
            "responseHeadersStart",
            "responseHeadersEnd",
            "responseBodyStart",
            "responseBodyEnd",
            "connectionReleased",
            "callEnd",
        ]
        assert "* requestBodyEnd: byteCount=6" in recorder.lines
        assert "* responseBodyEnd: byteCount=0" in recorder.lines
        assert recorder.lines[0] == f"* callStart: Request{{method=POST, url={base_url}/}}"

    def test_second_call_reuses_pooled_connection(self, client, recorder, base_url):
        client.get(f"{base_url}/")
        first_call_lines = len(recorder.lines)

        client.get(f"{base_url}/")

        second = recorder.events()[first_call_lines:]
        assert second == [
            "callStart",
            "connectionAcquired",
            "requestHeadersStart",
            "requestHeadersEnd",
            "responseHeadersStart",
            "responseHeadersEnd",
            "responseBodyStart",
            "responseBodyEnd",
            "connectionReleased",
            "callEnd",
        ]

    def test_base_url_and_relative_path(self, call_logger, recorder, base_url, loopback_resolver):
        with HTTPClient(
            call_logger.event_listener_factory(),
            base_url=base_url,
            resolver=loopback_resolver,
        ) as client:
            response = client.get("/hello")

        assert response.status_code == 200
        assert recorder.lines[0] == f"* callStart: Request{{method=GET, url={base_url}/hello}}"
        assert recorder.events()[-1] == "callEnd"


class TestSecureCalls:

    @pytest.fixture
    def secure_client(self, call_logger, client_ssl_context, loopback_resolver):
        client = HTTPClient(
            call_logger.event_listener_factory(),
            timeout=5,
            verify=client_ssl_context,
            resolver=loopback_resolver,
        )
        yield client
        client.close()

    def test_secure_get(self, secure_client, recorder, https_server):
        port = https_server.server_address[1]
        url = f"https://localhost:{port}/"

        response = secure_client.get(url)

        assert response.text == "Hello!"
        (recorder
            .expect(f"* callStart: Request{{method=GET, url={url}}}")
            .expect("* dnsStart: localhost")
            .expect("* dnsEnd: ['127.0.0.1']")
            .expect(f"* connectStart: localhost/127.0.0.1:{port} DIRECT")
            .expect("* secureConnectStart")
            .expect("* secureConnectEnd")
            .expect("* connectEnd: http/1.1")
            .expect_match(
                rf"\* connectionAcquired: Connection\{{localhost:{port}, proxy=DIRECT "
                rf"hostAddress=localhost/127\.0\.0\.1:{port} cipherSuite=TLS_\w+ "
                rf"protocol=http/1\.1\}}"
            )
            .expect("* requestHeadersStart")
            .expect("* requestHeadersEnd")
            .expect("* responseHeadersStart")
            .expect(
                f"* responseHeadersEnd: Response{{protocol=http/1.1, code=200, "
                f"message=OK, url={url}}}"
            )
            .expect("* responseBodyStart")
            .expect("* responseBodyEnd: byteCount=6")
            .expect("* connectionReleased")
            .expect_match(r"\* callEnd \(took \d+ms\)")
            .expect_no_more())

    def test_second_call_on_pooled_tls_connection(self, secure_client, recorder, https_server):
        url = f"https://localhost:{https_server.server_address[1]}/"

        secure_client.get(url)
        first_call = list(recorder.lines)
        secure_client.get(url)
        second_call = recorder.lines[len(first_call):]

        assert recorder.events()[len(first_call):] == [
            "callStart",
            "connectionAcquired",
            "requestHeadersStart",
            "requestHeadersEnd",
            "responseHeadersStart",
            "responseHeadersEnd",
            "responseBodyStart",
            "responseBodyEnd",
            "connectionReleased",
            "callEnd",
        ]
        acquired = [line for line in first_call if line.startswith("* connectionAcquired")]
        assert second_call[1] == acquired[0]
        assert "cipherSuite=none" not in second_call[1]


class TestFailedCalls:

    def test_dns_failure(self, call_logger, recorder, base_url):
        def failing_resolver(host, port):
            raise socket.gaierror(-2, "Name or service not known")

        with HTTPClient(call_logger.event_listener_factory(), resolver=failing_resolver) as client:
            with pytest.raises(httpx.ConnectError):
                client.get(f"{base_url}/")

        (recorder
            .expect(f"* callStart: Request{{method=GET, url={base_url}/}}")
            .expect("* dnsStart: localhost")
            .expect("* callFailed: ConnectError: [Errno -2] Name or service not known")
            .expect_no_more())

    def test_unencodable_hostname_with_system_resolver(self, call_logger, recorder):
        host = "a" * 64 + ".example"

        with HTTPClient(call_logger.event_listener_factory()) as client:
            with pytest.raises(httpx.ConnectError):
                client.get(f"http://{host}/")

        (recorder
            .expect(f"* callStart: Request{{method=GET, url=http://{host}/}}")
            .expect(f"* dnsStart: {host}")
            .expect_match(r"\* callFailed: ConnectError: .+")
            .expect_no_more())

    def test_all_routes_refused(self, call_logger, recorder):
        port = _unused_port()
        resolver = lambda _host, _port: ["127.0.0.1", "127.0.0.1"]

        with HTTPClient(call_logger.event_listener_factory(), resolver=resolver) as client:
            with pytest.raises(httpx.ConnectError):
                client.get(f"http://localhost:{port}/")

        (recorder
            .expect_match(r"\* callStart: Request\{method=GET, url=http://localhost:\d+/\}")
            .expect("* dnsStart: localhost")
            .expect("* dnsEnd: ['127.0.0.1', '127.0.0.1']")
            .expect(f"* connectStart: localhost/127.0.0.1:{port} DIRECT")
            .expect_match(r"\* connectFailed: None ConnectError: .+")
            .expect(f"* connectStart: localhost/127.0.0.1:{port} DIRECT")
            .expect_match(r"\* connectFailed: None ConnectError: .+")
            .expect_match(r"\* callFailed: ConnectError: .+")
            .expect_no_more())

    def test_refused_route_then_working_route(self, call_logger, recorder, base_url, server_port):
        # Nothing listens on 127.0.0.2, the server is bound to 127.0.0.1 only
        resolver = lambda host, port: ["127.0.0.2", "127.0.0.1"]

        with HTTPClient(call_logger.event_listener_factory(), resolver=resolver) as client:
            response = client.get(f"{base_url}/")

        assert response.status_code == 200
        events = recorder.events()
        assert events[:7] == [
            "callStart",
            "dnsStart",
            "dnsEnd",
            "connectStart",
            "connectFailed",
            "connectStart",
            "connectEnd",
        ]
        assert recorder.lines[3] == f"* connectStart: localhost/127.0.0.2:{server_port} DIRECT"
        assert recorder.lines[5] == f"* connectStart: localhost/127.0.0.1:{server_port} DIRECT"
        assert events.count("callEnd") == 1
        assert "callFailed" not in events
        assert events[-1] == "callEnd"


class TestListenerIntegration:

    def test_sink_error_propagates_to_caller(self, base_url, loopback_resolver):
        def failing_sink(message):
            raise RuntimeError("sink broken")

        call_logger = CallLogger(failing_sink)
        with HTTPClient(call_logger.event_listener_factory(), resolver=loopback_resolver) as client:
            with pytest.raises(RuntimeError, match="sink broken"):
                client.get(f"{base_url}/")

    def test_no_listener_factory(self, base_url, loopback_resolver):
        with HTTPClient(resolver=loopback_resolver) as client:
            response = client.get(f"{base_url}/")

        assert response.text == "Hello!"

    def test_factory_called_once_per_call(self, base_url, loopback_resolver):
        created = []

        def factory(call):
            listener = EventListener()
            created.append((call.call_id, listener))
            return listener

        with HTTPClient(factory, resolver=loopback_resolver) as client:
            client.get(f"{base_url}/")
            client.get(f"{base_url}/")

        assert len(created) == 2
        assert created[0][0] != created[1][0]
        assert created[0][1] is not created[1][1]

    def test_concurrent_calls_keep_separate_sequences(self, base_url, loopback_resolver):
        per_call = {}
        lock = threading.Lock()

        def factory(call):
            lines = []
            with lock:
                per_call[call.call_id] = lines
            return CallLogger(lines.append).event_listener_factory()(call)

        with HTTPClient(factory, resolver=loopback_resolver) as client:
            threads = [
                threading.Thread(target=client.get, args=(f"{base_url}/",))
                for _ in range(4)
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        assert len(per_call) == 4
        for lines in per_call.values():
            assert lines[0].startswith("* callStart:")
            assert lines[-1].startswith("* callEnd")
            assert sum(line.startswith("* callStart") for line in lines) == 1
