"""
Shared fixtures for the caching proxy tests.
"""

import pytest

from caching_proxy.config import Settings
from caching_proxy.repositories import HttpxForwarder

from fakes import ORIGIN_URL, FakeOrigin, InMemoryStore


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at the fake origin and a temporary cache directory."""
    return Settings(target_url=ORIGIN_URL, cache_dir=str(tmp_path / "cache"), cache_backend="file")


@pytest.fixture
def origin():
    """A fresh fake origin."""
    return FakeOrigin()


@pytest.fixture
def store():
    """An empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def forwarder(origin):
    """An HttpxForwarder wired to the fake origin."""
    return HttpxForwarder(target_url=ORIGIN_URL, transport=origin.transport)
