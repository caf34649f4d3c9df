"""Unit test fixtures with in-memory collaborators."""

import pytest

from infrastructure.settings import get_session_settings
from tenancy.infrastructure.key_value_store import InMemoryKeyValueStore


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings from the environment for every test."""
    get_session_settings.cache_clear()
    yield
    get_session_settings.cache_clear()


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    """Provide an empty in-memory key-value store."""
    return InMemoryKeyValueStore()
