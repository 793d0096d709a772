"""
Basic Call Logger Usage Examples

Demonstrates logging every lifecycle event of GET and POST calls.
"""

from http_call_logger import CallLogger, HTTPClient, LoggingConfig, configure_logging


def print_sink():
    """Lines go straight to stdout."""
    print("\n=== print() sink ===")

    call_logger = CallLogger(print)
    with HTTPClient(call_logger.event_listener_factory()) as client:
        response = client.get("https://jsonplaceholder.typicode.com/posts/1")
        print(f"Status: {response.status_code}")


def default_sink():
    """Lines go to the 'http_call_logger.calls' Python logger."""
    print("\n=== Python logging sink ===")

    configure_logging(LoggingConfig.create(level="INFO", format="colored"))

    call_logger = CallLogger()
    with HTTPClient(
        call_logger.event_listener_factory(),
        base_url="https://jsonplaceholder.typicode.com",
    ) as client:
        client.get("/posts/1")
        # Second call reuses the pooled connection: no DNS/connect lines
        client.post("/posts", json={"title": "My Post", "userId": 1})


if __name__ == "__main__":
    print_sink()
    default_sink()
