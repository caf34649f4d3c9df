"""Unit tests for IdentityWatcher."""

import pytest

from tenancy.application.company_cache import CompanyCache
from tenancy.application.identity_watcher import IdentityWatcher, to_identity
from tenancy.application.isolation_validator import IsolationValidator
from tenancy.domain.value_objects import Identity
from tenancy.ports.storage import SESSION_KEYS
from tests.unit.tenancy.fakes import (
    FailingKeyValueStore,
    FakeProviderUser,
    approved_tenant,
    make_document_store,
)


@pytest.fixture
def company_cache(cache_probe) -> CompanyCache:
    return CompanyCache(make_document_store(tenant=approved_tenant()), probe=cache_probe)


@pytest.fixture
def watcher(identity_provider, company_cache, storage, isolation_probe, watcher_probe) -> IdentityWatcher:
    return IdentityWatcher(
        identity_provider=identity_provider,
        company_cache=company_cache,
        isolation_validator=IsolationValidator(storage, probe=isolation_probe),
        storage=storage,
        probe=watcher_probe,
    )


class TestToIdentity:
    def test_none_stays_none(self):
        assert to_identity(None) is None

    def test_blank_optional_fields_become_none(self):
        identity = to_identity(FakeProviderUser(uid="uid-1", email="", display_name=""))

        assert identity == Identity(id="uid-1")

    def test_user_without_id_is_none(self):
        assert to_identity(FakeProviderUser(uid="")) is None
        assert to_identity(FakeProviderUser(uid="   ")) is None


class TestLifecycle:
    def test_start_subscribes_once(self, watcher, identity_provider, watcher_probe):
        watcher.start()
        watcher.start()

        assert watcher.is_started
        assert len(identity_provider.listeners) == 1
        watcher_probe.watcher_started.assert_called_once()

    def test_stop_unsubscribes(self, watcher, identity_provider, watcher_probe):
        watcher.start()

        watcher.stop()
        watcher.stop()

        assert not watcher.is_started
        assert identity_provider.listeners == []
        watcher_probe.watcher_stopped.assert_called_once()


class TestIdentityChanges:
    def test_sign_in_is_published(self, watcher, identity_provider, watcher_probe):
        received = []
        watcher.subscribe(received.append)
        watcher.start()

        identity_provider.emit(FakeProviderUser(uid="uid-1", email="owner@acme.test"))

        assert received == [Identity(id="uid-1", email="owner@acme.test")]
        assert watcher.current == received[0]
        watcher_probe.identity_signed_in.assert_called_once_with(user_id="uid-1")

    def test_disposed_listener_is_not_called(self, watcher, identity_provider):
        received = []
        dispose = watcher.subscribe(received.append)
        watcher.start()

        dispose()
        identity_provider.emit(FakeProviderUser(uid="uid-1"))

        assert received == []

    @pytest.mark.asyncio
    async def test_sign_out_tears_down_tenant_state(
        self, watcher, identity_provider, company_cache, storage, watcher_probe
    ):
        await company_cache.get("t1")
        for key in SESSION_KEYS:
            storage.set(key, "t1")
        storage.set("theme", "dark")
        seen_at_notification = []
        watcher.subscribe(lambda identity: seen_at_notification.append(storage.snapshot()))
        watcher.start()

        identity_provider.emit(None)

        assert len(company_cache) == 0
        assert storage.snapshot() == {"theme": "dark"}
        assert seen_at_notification == [{"theme": "dark"}]
        assert watcher.current is None
        watcher_probe.session_state_torn_down.assert_called_once_with(cached_tenants=1)

    def test_user_without_id_is_ignored(self, watcher, identity_provider, watcher_probe):
        received = []
        watcher.subscribe(received.append)
        watcher.start()
        identity_provider.emit(FakeProviderUser(uid="uid-1"))

        identity_provider.emit(FakeProviderUser(uid=""))

        assert received == [Identity(id="uid-1")]
        assert watcher.current == Identity(id="uid-1")
        watcher_probe.blank_identity_ignored.assert_called_once()
        watcher_probe.identity_signed_out.assert_not_called()

    @pytest.mark.asyncio
    async def test_sign_out_notifies_listeners_when_storage_fails(
        self, identity_provider, company_cache, isolation_probe, watcher_probe
    ):
        storage = FailingKeyValueStore({key: "t1" for key in SESSION_KEYS})
        watcher = IdentityWatcher(
            identity_provider=identity_provider,
            company_cache=company_cache,
            isolation_validator=IsolationValidator(storage, probe=isolation_probe),
            storage=storage,
            probe=watcher_probe,
        )
        await company_cache.get("t1")
        received = []
        watcher.subscribe(received.append)
        watcher.start()
        identity_provider.emit(FakeProviderUser(uid="uid-1"))
        storage.fail_remove = True

        identity_provider.emit(None)

        assert received == [Identity(id="uid-1"), None]
        assert watcher.current is None
        assert len(company_cache) == 0
        assert watcher_probe.session_key_removal_failed.call_count == len(SESSION_KEYS)
        isolation_probe.session_cleanup_failed.assert_called_once()
        watcher_probe.session_state_torn_down.assert_called_once_with(cached_tenants=1)
