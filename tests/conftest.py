"""Shared test fixtures for tokenware."""

import os

# Set a test signing key before anything calls get_config().
os.environ.setdefault("TOKENWARE_SIGNING_KEY", "test-signing-key-for-unit-tests-0123456789")

import fakeredis  # noqa: E402
import pytest  # noqa: E402

from tokenware.auth.revocation import InMemoryRevocationStore, RedisRevocationStore  # noqa: E402
from tokenware.config import TokenConfig, get_config  # noqa: E402
from tests.helpers.token_factory import OTHER_SIGNING_KEY, TEST_SIGNING_KEY  # noqa: E402

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> TokenConfig:
    """Default configuration with a strong test key."""
    return TokenConfig(signing_key=TEST_SIGNING_KEY)


@pytest.fixture()
def other_config() -> TokenConfig:
    """Same settings, different signing key."""
    return TokenConfig(signing_key=OTHER_SIGNING_KEY)


@pytest.fixture(autouse=True)
def _reset_cached_config():
    """Keep ``get_config()`` from leaking between tests that patch the env."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


# ---------------------------------------------------------------------------
# Revocation stores
# ---------------------------------------------------------------------------


@pytest.fixture()
def memory_store() -> InMemoryRevocationStore:
    return InMemoryRevocationStore()


@pytest.fixture()
def redis_client():
    """Provide a fake synchronous Redis client."""
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.close()


@pytest.fixture()
def redis_store(redis_client) -> RedisRevocationStore:
    return RedisRevocationStore(redis_client)
