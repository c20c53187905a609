import json
import os

import aiohttp
import pytest

from media_api import ProxyRelay

# data.loader builds the Bot at import time and needs a well-formed token
os.environ.setdefault("BOT_TOKEN", "123456:test-token")


class FakeResponse:
    def __init__(self, status=200, body=b"", content_type="application/json"):
        self.status = status
        self._body = body
        self.headers = {"Content-Type": content_type}

    async def read(self):
        return self._body


class FakeRequest:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """aiohttp.ClientSession stand-in answering from a url -> outcome map.

    Unknown URLs fail like an unreachable host.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.calls.append(url)
        outcome = self.routes.get(url)
        if outcome is None:
            outcome = aiohttp.ClientConnectionError(f"Cannot connect to {url}")
        return FakeRequest(outcome)

    async def close(self):
        self.closed = True


def json_response(data, status=200):
    return FakeResponse(status, json.dumps(data).encode())


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def direct_relay(session):
    """Relay with only the direct route, so URLs reach the fake unchanged."""
    return ProxyRelay(templates=[], include_direct=True, session=session)
