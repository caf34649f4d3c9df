"""Fixtures for tenancy unit tests."""

from unittest.mock import MagicMock

import pytest

from tenancy.application.observability import (
    CompanyCacheProbe,
    IdentityWatcherProbe,
    IsolationProbe,
    SessionEngineProbe,
    SessionGuardProbe,
    TenantResolverProbe,
    TenantSelectorProbe,
)
from tenancy.domain.value_objects import Identity
from tests.unit.tenancy.fakes import (
    FakeActivitySource,
    FakeIdentityProvider,
    FakeScheduler,
)


@pytest.fixture
def identity() -> Identity:
    return Identity(id="uid-1", email="owner@acme.test", display_name="Owner")


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def activity_source() -> FakeActivitySource:
    return FakeActivitySource()


@pytest.fixture
def cache_probe() -> MagicMock:
    return MagicMock(spec=CompanyCacheProbe)


@pytest.fixture
def resolver_probe() -> MagicMock:
    probe = MagicMock(spec=TenantResolverProbe)
    probe.with_context.return_value = probe
    return probe


@pytest.fixture
def selector_probe() -> MagicMock:
    return MagicMock(spec=TenantSelectorProbe)


@pytest.fixture
def guard_probe() -> MagicMock:
    return MagicMock(spec=SessionGuardProbe)


@pytest.fixture
def isolation_probe() -> MagicMock:
    return MagicMock(spec=IsolationProbe)


@pytest.fixture
def watcher_probe() -> MagicMock:
    return MagicMock(spec=IdentityWatcherProbe)


@pytest.fixture
def engine_probe() -> MagicMock:
    return MagicMock(spec=SessionEngineProbe)
