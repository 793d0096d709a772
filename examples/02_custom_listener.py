"""
Custom EventListener Example

Collects per-phase timings instead of log lines.
"""

import time

from http_call_logger import EventListener, HTTPClient


class TimingListener(EventListener):
    """Measures DNS, connect and time-to-first-byte for one call."""

    def __init__(self):
        self.marks = {}

    def _mark(self, name):
        self.marks[name] = time.perf_counter()

    def call_start(self, call):
        self._mark("start")

    def dns_end(self, call, domain_name, addresses):
        self._mark("dns")

    def connect_end(self, call, address, proxy, protocol):
        self._mark("connect")

    def response_headers_start(self, call):
        self._mark("waiting")

    def response_headers_end(self, call, response):
        self._mark("first_byte")

    def call_end(self, call):
        start = self.marks["start"]
        phases = ", ".join(
            f"{name}={(mark - start) * 1000:.1f}ms"
            for name, mark in self.marks.items()
            if name != "start"
        )
        print(f"{call.request}: {phases}")


if __name__ == "__main__":
    with HTTPClient(lambda call: TimingListener()) as client:
        client.get("https://example.com/")
        client.get("https://example.com/")
