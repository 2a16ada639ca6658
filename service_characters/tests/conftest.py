"""
Shared fixtures for Character Service tests.
"""

from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from mocks.character_api.server import MockCharacterApiServer
from shared.config import get_config


UPSTREAM_BASE_URL = "http://upstream.test/api"


class FakeRedis:
    """In-memory stand-in for the subset of redis.asyncio.Redis the store uses."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.get_calls: List[str] = []
        self.set_calls: List[Tuple[str, str]] = []
        self.fail_reads = False
        self.fail_writes = False
        self.closed = False

    async def get(self, key: str) -> Optional[str]:
        self.get_calls.append(key)
        if self.fail_reads:
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.set_calls.append((key, value))
        if self.fail_writes:
            raise RedisConnectionError("Connection reset by peer")
        self.data[key] = value
        return True

    async def ping(self) -> bool:
        if self.fail_reads:
            raise RedisConnectionError("Connection refused")
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def mock_upstream():
    """In-process mock of the character API."""
    return MockCharacterApiServer()


@pytest.fixture
def upstream_http_client(mock_upstream):
    """HTTP client whose requests are served by the mock character API."""
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=mock_upstream.app))


@pytest.fixture
def cached_config():
    return get_config(variant="cached", upstream_base_url=UPSTREAM_BASE_URL)


@pytest.fixture
def proxy_config():
    return get_config(variant="proxy", upstream_base_url=UPSTREAM_BASE_URL)
