"""Session engine.

The surface the UI layer consumes: a reactive ``ResolutionState`` plus
the operations a signed-in user can perform on it. The engine wires the
identity watcher to the tenant resolver, keeps the session guard and
the isolation validator in step with every published state, and makes
sure a newer identity event always supersedes a resolution in flight.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from shared_kernel.observability_context import ObservationContext
from tenancy.application.identity_watcher import IdentityWatcher, to_identity
from tenancy.application.isolation_validator import IsolationCheck, IsolationValidator
from tenancy.application.observability import (
    DefaultSessionEngineProbe,
    SessionEngineProbe,
)
from tenancy.application.session_guard import SessionGuard
from tenancy.application.tenant_resolver import PlatformAdminAccess, TenantResolver
from tenancy.application.tenant_selector import ActiveTenantSelector
from tenancy.domain.models import OnboardingError, ResolutionState
from tenancy.domain.permissions import can_write
from tenancy.domain.value_objects import Identity, ResolutionPhase, WritableSection
from tenancy.ports.identity import IIdentityProvider
from tenancy.ports.storage import ACTIVE_TENANT_ID_KEY, IKeyValueStore

StateListener = Callable[[ResolutionState], None]


class SessionEngine:
    """Tenant resolution and session state for the signed-in user."""

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        identity_watcher: IdentityWatcher,
        resolver: TenantResolver,
        selector: ActiveTenantSelector,
        guard: SessionGuard,
        isolation_validator: IsolationValidator,
        storage: IKeyValueStore,
        probe: SessionEngineProbe | None = None,
    ):
        self._identity_provider = identity_provider
        self._identity_watcher = identity_watcher
        self._resolver = resolver
        self._selector = selector
        self._guard = guard
        self._isolation_validator = isolation_validator
        self._storage = storage
        self._probe = probe or DefaultSessionEngineProbe()

        self._state = ResolutionState.unresolved()
        self._listeners: list[StateListener] = []
        self._token = 0
        self._resolution_task: asyncio.Task[None] | None = None
        self._detach_watcher: Callable[[], None] | None = None
        self._last_isolation_check: IsolationCheck | None = None

    @property
    def state(self) -> ResolutionState:
        """The current resolution state."""
        return self._state

    @property
    def last_isolation_check(self) -> IsolationCheck | None:
        """Result of the isolation check run on the last published state.

        None until the first state is published.
        """
        return self._last_isolation_check

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new state.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def start(self) -> None:
        """Attach to the identity watcher and start observing the provider."""
        if self._detach_watcher is None:
            self._detach_watcher = self._identity_watcher.subscribe(
                self.handle_identity_change
            )
        self._identity_watcher.start()

    async def close(self) -> None:
        """Detach from the provider, cancel any resolution and disarm the guard."""
        self._identity_watcher.stop()
        if self._detach_watcher is not None:
            detach, self._detach_watcher = self._detach_watcher, None
            detach()
        self._token += 1
        await self._cancel_in_flight()
        self._guard.close()

    def handle_identity_change(self, identity: Identity | None) -> None:
        """Start resolving a new identity, superseding any resolution in flight.

        Must be called from within the running event loop.
        """
        self._token += 1
        token = self._token
        if self._resolution_task is not None and not self._resolution_task.done():
            self._resolution_task.cancel()
            self._probe.resolution_superseded(
                user_id=self._state.identity.id if self._state.identity else None,
                token=token - 1,
            )
        self._resolution_task = None

        if identity is None:
            self._publish(ResolutionState.unresolved())
            return

        self._publish(ResolutionState.resolving(identity))
        self._resolution_task = asyncio.get_running_loop().create_task(
            self._resolve(identity, token)
        )

    async def wait_until_settled(self) -> ResolutionState:
        """Wait for the resolution in flight, if any, and return the state."""
        while self._resolution_task is not None and not self._resolution_task.done():
            task = self._resolution_task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self._state

    async def retry(self) -> ResolutionState:
        """Re-run resolution for the current identity from scratch."""
        identity = self._state.identity
        if identity is not None:
            self.handle_identity_change(identity)
        return await self.wait_until_settled()

    def select_tenant(self, tenant_id: str | None) -> bool:
        """Select the active tenant, or clear it with None.

        Unauthorized or malformed selections are logged and ignored.

        Returns:
            True if the state changed
        """
        updated = self._selector.select(self._state.session, tenant_id)
        if updated is None:
            return False
        self._publish(ResolutionState.for_session(updated))
        return True

    def can_write(self, section: WritableSection | str) -> bool:
        """Check if the active role may write to a section."""
        return can_write(self._state.active_role, section)

    def clear_onboarding_error(self) -> None:
        """Dismiss the current onboarding error; the identity stays signed in."""
        if self._state.phase != ResolutionPhase.ONBOARDING_BLOCKED:
            return
        identity = self._state.identity
        self._publish(ResolutionState.unresolved(identity))
        if identity is not None:
            self._probe.onboarding_error_cleared(user_id=identity.id)

    async def sign_out(self) -> None:
        """Ask the identity provider to sign the user out.

        Raises:
            IdentityProviderError: If the provider rejects the request
        """
        self._probe.sign_out_requested(
            user_id=self._state.identity.id if self._state.identity else None
        )
        self._guard.close()
        try:
            await self._identity_provider.sign_out()
        except Exception:
            # Still signed in: keep the inactivity timeout in force.
            self._guard.sync(self._state.identity, self._state.active_tenant_id)
            raise

    async def sign_in_with_password(self, email: str, password: str) -> Identity | None:
        """Sign in with credentials; resolution follows from the provider event."""
        return to_identity(await self._identity_provider.sign_in_with_password(email, password))

    async def sign_in_with_provider(self) -> Identity | None:
        """Sign in through the provider's federated flow."""
        return to_identity(await self._identity_provider.sign_in_with_provider())

    async def register(self, email: str, password: str, display_name: str) -> Identity | None:
        """Create an account through the identity provider."""
        return to_identity(
            await self._identity_provider.register(email, password, display_name)
        )

    async def _resolve(self, identity: Identity, token: int) -> None:
        outcome = await self._resolver.resolve(
            identity,
            persisted_tenant_id=self._read_persisted_hint(identity),
            context=ObservationContext.for_resolution(),
        )
        if token != self._token:
            self._probe.stale_resolution_discarded(user_id=identity.id, token=token)
            return

        if isinstance(outcome, PlatformAdminAccess):
            self._publish(ResolutionState.platform_admin(identity))
        elif isinstance(outcome, OnboardingError):
            self._publish(ResolutionState.blocked(identity, outcome))
        else:
            self._selector.persist(outcome)
            self._publish(ResolutionState.for_session(outcome))

    def _read_persisted_hint(self, identity: Identity) -> str | None:
        try:
            return self._storage.get(ACTIVE_TENANT_ID_KEY)
        except OSError as e:
            self._probe.persisted_hint_unreadable(user_id=identity.id, error=e)
            return None

    async def _cancel_in_flight(self) -> None:
        task, self._resolution_task = self._resolution_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def _publish(self, state: ResolutionState) -> None:
        self._state = state
        self._probe.state_changed(
            phase=state.phase,
            user_id=state.identity.id if state.identity else None,
        )
        self._guard.sync(state.identity, state.active_tenant_id)
        self._last_isolation_check = self._isolation_validator.validate(
            state.identity, state.active_tenant_id
        )
        for listener in list(self._listeners):
            listener(state)
