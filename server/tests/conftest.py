"""
Shared fixtures. The in-memory store runs on a fake clock so TTL
behaviour is driven by the tests.
"""

import httpx
import pytest

from writecoach.shared.clients.store import MemoryStore
from writecoach.shared.services.blocking import UserBlockService
from writecoach.shared.services.cache import ResponseCache
from writecoach.shared.services.circuit import CircuitBreaker

from helpers import FakeClock, UnreachableStore


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def unreachable_store():
    return UnreachableStore()


@pytest.fixture
def circuit_breaker(store):
    return CircuitBreaker(store, failure_threshold=3, failure_window_seconds=60)


@pytest.fixture
def user_blocks(store):
    return UserBlockService(store, block_ttl_seconds=60)


@pytest.fixture
def response_cache(store):
    return ResponseCache(store, ttl=86400)


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client
