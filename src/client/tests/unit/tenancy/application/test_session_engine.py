"""Unit tests for SessionEngine."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from tenancy.application.company_cache import CompanyCache
from tenancy.application.identity_watcher import IdentityWatcher
from tenancy.application.isolation_validator import (
    NO_ACTIVE_COMPANY_ERROR,
    NOT_AUTHENTICATED_ERROR,
    IsolationValidator,
)
from tenancy.application.session_engine import SessionEngine
from tenancy.application.session_guard import GuardState, SessionGuard
from tenancy.application.tenant_resolver import TenantResolver
from tenancy.application.tenant_selector import ActiveTenantSelector
from tenancy.domain.models import Membership, ResolutionState, Session, TenantProfile
from tenancy.domain.value_objects import (
    Identity,
    OnboardingReason,
    ResolutionPhase,
    Role,
    TenantStatus,
)
from tenancy.ports.exceptions import IdentityProviderError
from tenancy.ports.storage import ACTIVE_ROLE_KEY, ACTIVE_TENANT_ID_KEY
from tests.unit.tenancy.fakes import (
    FailingKeyValueStore,
    FakeProviderUser,
    approved_tenant,
    linked_profile,
    make_document_store,
)


def build_engine(
    document_store,
    identity_provider,
    storage,
    scheduler,
    activity_source,
    probes,
) -> SessionEngine:
    isolation_validator = IsolationValidator(storage, probe=probes["isolation"])
    company_cache = CompanyCache(document_store, probe=probes["cache"])
    return SessionEngine(
        identity_provider=identity_provider,
        identity_watcher=IdentityWatcher(
            identity_provider,
            company_cache,
            isolation_validator,
            storage,
            probe=probes["watcher"],
        ),
        resolver=TenantResolver(document_store, company_cache, probe=probes["resolver"]),
        selector=ActiveTenantSelector(storage, isolation_validator, probe=probes["selector"]),
        guard=SessionGuard(
            identity_provider,
            scheduler,
            activity_source=activity_source,
            probe=probes["guard"],
        ),
        isolation_validator=isolation_validator,
        storage=storage,
        probe=probes["engine"],
    )


@pytest.fixture
def probes(
    cache_probe,
    resolver_probe,
    selector_probe,
    guard_probe,
    isolation_probe,
    watcher_probe,
    engine_probe,
) -> dict:
    return {
        "cache": cache_probe,
        "resolver": resolver_probe,
        "selector": selector_probe,
        "guard": guard_probe,
        "isolation": isolation_probe,
        "watcher": watcher_probe,
        "engine": engine_probe,
    }


@pytest.fixture
def document_store():
    return make_document_store(profile=linked_profile(role=Role.EMPLOYEE), tenant=approved_tenant())


@pytest.fixture
def engine(document_store, identity_provider, storage, scheduler, activity_source, probes):
    engine = build_engine(
        document_store, identity_provider, storage, scheduler, activity_source, probes
    )
    engine.start()
    return engine


def sign_in(identity_provider, uid: str = "uid-1") -> None:
    identity_provider.emit(FakeProviderUser(uid=uid, email=f"{uid}@acme.test"))


class TestResolution:
    """Tests for resolving identities into published states."""

    def test_starts_unresolved(self, engine):
        assert engine.state == ResolutionState.unresolved()

    @pytest.mark.asyncio
    async def test_sign_in_resolves_active_session(self, engine, identity_provider, storage):
        phases = []
        engine.subscribe(lambda state: phases.append(state.phase))

        sign_in(identity_provider)
        state = await engine.wait_until_settled()

        assert phases == [ResolutionPhase.RESOLVING, ResolutionPhase.ACTIVE]
        assert state.active_tenant_id == "t1"
        assert state.active_role == Role.EMPLOYEE
        assert state.onboarding_error is None
        assert storage.get(ACTIVE_TENANT_ID_KEY) == "t1"
        assert storage.get(ACTIVE_ROLE_KEY) == "employee"
        assert engine.last_isolation_check.is_valid

    @pytest.mark.asyncio
    async def test_active_session_arms_guard(self, engine, identity_provider, scheduler):
        sign_in(identity_provider)
        await engine.wait_until_settled()

        assert len(scheduler.pending) == 1

    @pytest.mark.asyncio
    async def test_onboarding_error_never_carries_session(
        self, identity_provider, storage, scheduler, activity_source, probes
    ):
        store = make_document_store(
            profile=linked_profile(),
            tenant=TenantProfile("t1", name="Acme", status=TenantStatus.PENDING),
        )
        engine = build_engine(store, identity_provider, storage, scheduler, activity_source, probes)
        engine.start()

        sign_in(identity_provider)
        state = await engine.wait_until_settled()

        assert state.phase == ResolutionPhase.ONBOARDING_BLOCKED
        assert state.onboarding_error.reason == OnboardingReason.TENANT_PENDING
        assert state.session is None
        assert scheduler.pending == []

    @pytest.mark.asyncio
    async def test_platform_admin_state(
        self, identity_provider, storage, scheduler, activity_source, probes
    ):
        store = make_document_store(is_admin=True)
        engine = build_engine(store, identity_provider, storage, scheduler, activity_source, probes)
        engine.start()

        sign_in(identity_provider)
        state = await engine.wait_until_settled()

        assert state.phase == ResolutionPhase.PLATFORM_ADMIN
        assert state.active_tenant_id is None

    @pytest.mark.asyncio
    async def test_newer_identity_supersedes_resolution_in_flight(
        self, engine, identity_provider, document_store, engine_probe
    ):
        release = asyncio.Event()

        async def slow_profile(user_id):
            if user_id == "uid-1":
                await release.wait()
            return linked_profile(user_id=user_id)

        document_store.get_user_profile.side_effect = slow_profile

        sign_in(identity_provider, "uid-1")
        await asyncio.sleep(0)
        sign_in(identity_provider, "uid-2")
        release.set()
        state = await engine.wait_until_settled()

        assert state.identity.id == "uid-2"
        assert state.phase == ResolutionPhase.ACTIVE
        engine_probe.resolution_superseded.assert_called_once()

    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(self, engine, identity, engine_probe):
        gate = asyncio.Event()
        original = engine._resolver.resolve

        async def gated_resolve(*args, **kwargs):
            result = await original(*args, **kwargs)
            await asyncio.shield(gate.wait())
            return result

        engine._resolver.resolve = AsyncMock(side_effect=gated_resolve)

        engine.handle_identity_change(identity)
        first = engine._resolution_task
        await asyncio.sleep(0.01)
        # Bump the token without cancelling, as a late result would see it.
        engine._token += 1
        gate.set()
        await first

        engine_probe.stale_resolution_discarded.assert_called_once()
        assert engine.state.phase == ResolutionPhase.RESOLVING

    @pytest.mark.asyncio
    async def test_sign_out_event_resets_state(self, engine, identity_provider, storage, scheduler):
        sign_in(identity_provider)
        await engine.wait_until_settled()

        identity_provider.emit(None)

        assert engine.state == ResolutionState.unresolved()
        assert storage.snapshot() == {}
        assert scheduler.pending == []

    @pytest.mark.asyncio
    async def test_retry_reruns_resolution(self, engine, identity_provider, document_store):
        document_store.get_user_profile.side_effect = [ConnectionError("offline"), linked_profile()]

        sign_in(identity_provider)
        blocked = await engine.wait_until_settled()
        retried = await engine.retry()

        assert blocked.onboarding_error.reason == OnboardingReason.NETWORK_UNREACHABLE
        assert retried.phase == ResolutionPhase.ACTIVE

    @pytest.mark.asyncio
    async def test_clear_onboarding_error_keeps_identity(
        self, identity_provider, storage, scheduler, activity_source, probes
    ):
        store = make_document_store(profile=None)
        engine = build_engine(store, identity_provider, storage, scheduler, activity_source, probes)
        engine.start()
        sign_in(identity_provider)
        await engine.wait_until_settled()

        engine.clear_onboarding_error()

        assert engine.state.phase == ResolutionPhase.UNRESOLVED
        assert engine.state.onboarding_error is None
        assert engine.state.identity.id == "uid-1"
        probes["engine"].onboarding_error_cleared.assert_called_once_with(user_id="uid-1")


class TestTenantSelection:
    """Tests for tenant selection through the engine."""

    @pytest.mark.asyncio
    async def test_unauthorized_select_does_not_change_state(self, engine, identity_provider):
        sign_in(identity_provider)
        before = await engine.wait_until_settled()

        assert engine.select_tenant("t9") is False
        assert engine.state is before

    @pytest.mark.asyncio
    async def test_deselect_moves_to_tenant_choice(self, engine, identity_provider, storage, scheduler):
        sign_in(identity_provider)
        await engine.wait_until_settled()

        assert engine.select_tenant(None) is True

        assert engine.state.phase == ResolutionPhase.AWAITING_TENANT_CHOICE
        assert engine.state.active_role is None
        assert storage.snapshot() == {}
        assert scheduler.pending == []

    @pytest.mark.asyncio
    async def test_select_with_several_memberships(self, engine, identity):
        session = Session(
            identity=identity,
            memberships=(
                Membership("t1", "Acme", Role.OWNER),
                Membership("t2", "Globex", Role.VIEWER),
            ),
        )
        engine._publish(ResolutionState.for_session(session))

        assert engine.select_tenant("t2") is True
        assert engine.state.active_role == Role.VIEWER
        assert engine.can_write("invoices") is False

    def test_select_without_session_is_ignored(self, engine):
        assert engine.select_tenant("t1") is False
        assert engine.state == ResolutionState.unresolved()

    @pytest.mark.asyncio
    async def test_can_write_follows_active_role(self, engine, identity_provider):
        assert engine.can_write("invoices") is False

        sign_in(identity_provider)
        await engine.wait_until_settled()

        assert engine.can_write("invoices") is True
        assert engine.can_write("settings") is False


class TestSignOut:
    """Tests for user-initiated sign-out."""

    @pytest.mark.asyncio
    async def test_sign_out_clears_session(self, engine, identity_provider, storage):
        sign_in(identity_provider)
        await engine.wait_until_settled()

        await engine.sign_out()

        assert identity_provider.sign_out_calls == 1
        assert engine.state.phase == ResolutionPhase.UNRESOLVED
        assert storage.snapshot() == {}

    @pytest.mark.asyncio
    async def test_failed_sign_out_keeps_guard_armed(self, engine, identity_provider, scheduler):
        sign_in(identity_provider)
        await engine.wait_until_settled()
        identity_provider.sign_out_error = IdentityProviderError("offline")

        with pytest.raises(IdentityProviderError):
            await engine.sign_out()

        assert engine.state.phase == ResolutionPhase.ACTIVE
        assert engine._guard.state == GuardState.ARMED
        assert len(scheduler.pending) == 1

    @pytest.mark.asyncio
    async def test_inactivity_signs_out_through_provider(self, engine, identity_provider, scheduler):
        sign_in(identity_provider)
        await engine.wait_until_settled()

        scheduler.advance(30 * 60)
        await engine._guard.expiry_task

        assert identity_provider.sign_out_calls == 1
        assert engine.state == ResolutionState.unresolved()


class TestSignIn:
    """Tests for the sign-in pass-throughs."""

    @pytest.mark.asyncio
    async def test_sign_in_with_password(self, engine, identity_provider):
        identity = await engine.sign_in_with_password("owner@acme.test", "secret")

        assert identity == Identity(id="uid-1")
        identity_provider.sign_in_with_password.assert_awaited_once_with("owner@acme.test", "secret")

    @pytest.mark.asyncio
    async def test_register(self, engine, identity_provider):
        identity = await engine.register("new@acme.test", "secret", "New User")

        assert identity == Identity(id="uid-new")

    @pytest.mark.asyncio
    async def test_sign_in_with_provider(self, engine):
        assert await engine.sign_in_with_provider() == Identity(id="uid-1")


class TestClose:
    @pytest.mark.asyncio
    async def test_close_detaches_and_disarms(self, engine, identity_provider, scheduler):
        sign_in(identity_provider)
        await engine.wait_until_settled()

        await engine.close()

        assert identity_provider.listeners == []
        assert scheduler.pending == []

    @pytest.mark.asyncio
    async def test_close_cancels_resolution_in_flight(self, engine, identity_provider, document_store):
        never = asyncio.Event()

        async def hang(user_id):
            await never.wait()

        document_store.get_user_profile.side_effect = hang
        sign_in(identity_provider)
        task = engine._resolution_task

        await engine.close()

        assert task.cancelled()


class TestIsolationChecks:
    """Every published state is checked for tenant isolation."""

    def test_unresolved_state_is_not_authenticated(self, engine):
        engine.handle_identity_change(None)

        assert engine.last_isolation_check.errors == [NOT_AUTHENTICATED_ERROR]

    @pytest.mark.asyncio
    async def test_blocked_state_has_no_active_company(
        self, identity_provider, storage, scheduler, activity_source, probes
    ):
        store = make_document_store(profile=None)
        engine = build_engine(store, identity_provider, storage, scheduler, activity_source, probes)
        engine.start()

        sign_in(identity_provider)
        await engine.wait_until_settled()

        assert engine.last_isolation_check.errors == [NO_ACTIVE_COMPANY_ERROR]
        assert engine.last_isolation_check.user_id == "uid-1"


class TestStorageFailures:
    """Persisted hint storage failing never leaves the engine stuck."""

    @pytest.fixture
    def failing_storage(self) -> FailingKeyValueStore:
        return FailingKeyValueStore()

    @pytest.fixture
    def engine(
        self, document_store, identity_provider, failing_storage, scheduler, activity_source, probes
    ):
        engine = build_engine(
            document_store, identity_provider, failing_storage, scheduler, activity_source, probes
        )
        engine.start()
        return engine

    @pytest.mark.asyncio
    async def test_sign_out_completes_when_storage_cannot_be_written(
        self, engine, identity_provider, failing_storage, scheduler, probes
    ):
        sign_in(identity_provider)
        await engine.wait_until_settled()
        failing_storage.fail_remove = True

        identity_provider.emit(None)

        assert engine.state == ResolutionState.unresolved()
        assert engine._guard.state == GuardState.DISARMED
        assert scheduler.pending == []
        assert probes["watcher"].session_key_removal_failed.call_count == 4
        probes["isolation"].session_cleanup_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_unreadable_hint_is_ignored(
        self, engine, identity_provider, failing_storage, probes
    ):
        failing_storage.fail_get = True

        sign_in(identity_provider)
        state = await engine.wait_until_settled()

        assert state.phase == ResolutionPhase.ACTIVE
        assert state.active_tenant_id == "t1"
        probes["engine"].persisted_hint_unreadable.assert_called_once()
        assert engine.last_isolation_check.is_valid

    @pytest.mark.asyncio
    async def test_unwritable_hint_keeps_session(
        self, engine, identity_provider, failing_storage, probes
    ):
        failing_storage.fail_set = True

        sign_in(identity_provider)
        state = await engine.wait_until_settled()

        assert state.phase == ResolutionPhase.ACTIVE
        assert failing_storage.snapshot() == {}
        probes["selector"].selection_persist_failed.assert_called_once()
