"""Shared pytest fixtures for nosclient tests.

HTTP is never sent over the network: every client is wired to an
``httpx.MockTransport`` whose handler is a ``StubService``. The stub
records each request it receives (with its body fully read) and answers
with whatever its ``handler`` returns, a plain 200 by default.
"""

from collections.abc import Callable
from datetime import datetime, timezone

import httpx
import pytest

from nosclient.client import NosClient
from nosclient.config import NosConfig

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
FIXED_DATE = "Tue, 02 Jan 2024 03:04:05 GMT"


class StubService:
    """A stateless fake NOS endpoint."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self.handler(request)

    def respond(self, status_code: int = 200, **kwargs) -> None:
        """Answer every following request with the same response."""
        self.handler = lambda request: httpx.Response(status_code, **kwargs)

    @property
    def called(self) -> bool:
        return bool(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def config() -> NosConfig:
    return NosConfig(endpoint="nos.example.com", access_key="test-ak", secret_key="test-sk")


@pytest.fixture
def stub() -> StubService:
    return StubService()


@pytest.fixture
def nos(config: NosConfig, stub: StubService):
    """A NosClient talking to the stub with a frozen clock."""
    client = NosClient(
        config,
        http_client=httpx.Client(transport=httpx.MockTransport(stub)),
        clock=lambda: FIXED_NOW,
    )
    yield client
    client.close()
