"""
Shared fixtures for the Imbo client tests.
"""

from typing import List, NamedTuple, Optional

import pytest

from imbo_client import ImboClient, TransportResponse

IMBO_URL = "http://imbo"
USER = "testuser"
PUBLIC_KEY = "christer"
PRIVATE_KEY = "test"


class SentRequest(NamedTuple):
    method: str
    url: str
    headers: dict
    body: Optional[bytes]
    timeout: Optional[float]


class FakeTransport:
    """Replays queued responses and records every request sent."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.requests: List[SentRequest] = []
        self.closed = False

    def queue(self, status_code=200, body=b"", headers=None):
        if isinstance(body, str):
            body = body.encode('utf-8')
        self.responses.append(TransportResponse(status_code, headers or {}, body))
        return self

    def send(self, method, url, headers, body=None, timeout=None):
        self.requests.append(SentRequest(method, url, dict(headers), body, timeout))
        if not self.responses:
            raise AssertionError(f"No response queued for {method} {url}")

        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_request(self) -> SentRequest:
        assert self.requests, "No request has been sent"
        return self.requests[-1]

    def close(self):
        self.closed = True


@pytest.fixture
def transport():
    """Create fake transport."""
    return FakeTransport()


@pytest.fixture
def client(transport):
    """Create test client backed by the fake transport."""
    return ImboClient(IMBO_URL, USER, PUBLIC_KEY, PRIVATE_KEY, transport=transport)
