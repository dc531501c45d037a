"""
Shared pytest fixtures for the client test suite.

This module provides fixtures that are automatically available to all test files:
- A Config pointing at reserved test hosts
- An open RequestClient that is closed after each test
- A FakeSessionBackend modelling the server-side idle timeout

HTTP is mocked with respx in the individual tests.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import Request, Response

from tarkov_api.api.transport import RequestClient
from tarkov_api.config import SESSION_TIMEOUT, Config
from tests.constants import LAUNCHER_URL, PROD_URL, RAGFAIR_URL, TRADING_URL
from tests.helpers import envelope_response

# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture
def config() -> Config:
    """Create a test configuration."""
    return Config(
        launcher_url=LAUNCHER_URL,
        prod_url=PROD_URL,
        trading_url=TRADING_URL,
        ragfair_url=RAGFAIR_URL,
        timeout=5.0,
    )


@pytest.fixture
async def transport(config: Config) -> AsyncGenerator[RequestClient, None]:
    """Create a request client for testing."""
    async with RequestClient(config) as transport:
        yield transport


# ============================================================================
# FAKE BACKEND
# ============================================================================


class FakeSessionBackend:
    """
    Keep-alive endpoint with a manual clock.

    A session stays valid while consecutive calls are less than ``timeout``
    seconds apart; after that every call answers NOT_AUTHORIZED (201).
    """

    def __init__(self, timeout: float = SESSION_TIMEOUT) -> None:
        self.timeout = timeout
        self.now = 0.0
        self.last_seen = 0.0
        self.expired = False
        self.requests: list[Request] = []

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.advance(seconds)

    def keep_alive(self, request: Request) -> Response:
        self.requests.append(request)
        if self.expired or self.now - self.last_seen >= self.timeout:
            self.expired = True
            return envelope_response(201, message="Not authorized")
        self.last_seen = self.now
        return envelope_response(0)


@pytest.fixture
def backend() -> FakeSessionBackend:
    """A fake backend with its clock at zero."""
    return FakeSessionBackend()
