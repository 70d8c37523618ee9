"""
Shared pytest fixtures and configuration for all tests.
"""
import os
from typing import Generator

import fakeredis
import pytest

# Hypothesis configuration for property-based testing
from hypothesis import settings, Verbosity, Phase

from config.settings import Environment, Settings, clear_settings_cache
from session.memory_store import InMemoryCacheStore

# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
    print_blob=True,  # Print failing examples for debugging
)

# CI profile: more thorough testing for continuous integration
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,  # Reproducible results in CI
)

# Debug profile: minimal examples for quick debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],  # Skip shrinking for speed
)

# Fast profile: quick smoke tests
settings.register_profile(
    "fast",
    max_examples=20,
    verbosity=Verbosity.normal,
    deadline=None,
)

# Load profile from environment variable HYPOTHESIS_PROFILE, default to "default"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

NOW = 1_700_000_000


class FakeClock:
    """Settable clock standing in for time.time."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """A clock frozen at NOW."""
    return FakeClock()


@pytest.fixture
def memory_store(clock) -> InMemoryCacheStore:
    """An in-memory cache store sharing the frozen clock."""
    return InMemoryCacheStore(prefix="session_cache:", clock=clock)


@pytest.fixture
def fake_redis() -> Generator[fakeredis.FakeRedis, None, None]:
    """A fake Redis client on its own server, returning raw bytes like connect() does."""
    server = fakeredis.FakeServer()
    client = fakeredis.FakeRedis(server=server)
    yield client
    client.flushall()
    client.close()


@pytest.fixture
def make_settings():
    """Build Settings without reading the environment or .env files."""
    def _make(**overrides) -> Settings:
        values = {"environment": Environment.DEVELOPMENT}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Keep cached settings from leaking between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()
