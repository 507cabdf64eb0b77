import pytest

from helpers import TODAY, FakeCache, InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def today():
    return lambda: TODAY
