"""Shared fixtures for resolver and API tests."""

import httpx
import pytest

from xcount.cache.store import InMemoryCountCache
from xcount.core.config import ResolverConfig, UpstreamConfig
from xcount.resolver.resolver import QueryResolver
from xcount.upstream.client import CountsClient

from tests.fakes import FakeClock, FakeUpstream


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def config():
    return ResolverConfig()


@pytest.fixture
def cache():
    store = InMemoryCountCache()
    yield store
    store.clear()


@pytest.fixture
def client(upstream):
    return CountsClient(
        UpstreamConfig(base_url="https://api.x.test/2", bearer_token="test-token"),
        transport=httpx.MockTransport(upstream.handler),
    )


@pytest.fixture
def resolver(cache, client, config, clock):
    return QueryResolver(cache=cache, client=client, config=config, clock=clock)
