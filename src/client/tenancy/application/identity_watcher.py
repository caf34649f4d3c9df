"""Identity watcher.

Observes the identity provider and republishes its sign-in/sign-out
transitions as ``Identity | None``. A transition to None tears down all
tenant state held by the client before listeners are told.
"""

from __future__ import annotations

from typing import Callable

from tenancy.application.company_cache import CompanyCache
from tenancy.application.isolation_validator import IsolationValidator
from tenancy.application.observability import (
    DefaultIdentityWatcherProbe,
    IdentityWatcherProbe,
)
from tenancy.domain.value_objects import Identity
from tenancy.ports.identity import IIdentityProvider, ProviderUser, Unsubscribe
from tenancy.ports.storage import SESSION_KEYS, IKeyValueStore

IdentityListener = Callable[[Identity | None], None]


def to_identity(user: ProviderUser | None) -> Identity | None:
    """Normalize a raw provider user into an Identity.

    Returns None for a missing user and for a user without an id.
    """
    if user is None or not (user.uid or "").strip():
        return None
    return Identity(
        id=user.uid,
        email=user.email or None,
        display_name=user.display_name or None,
    )


class IdentityWatcher:
    """Publishes identity changes from the identity provider.

    The watcher attaches to the provider in ``start()`` and detaches in
    ``stop()``. Listeners registered with ``subscribe()`` receive every
    change in registration order.
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        company_cache: CompanyCache,
        isolation_validator: IsolationValidator,
        storage: IKeyValueStore,
        probe: IdentityWatcherProbe | None = None,
    ):
        self._identity_provider = identity_provider
        self._company_cache = company_cache
        self._isolation_validator = isolation_validator
        self._storage = storage
        self._probe = probe or DefaultIdentityWatcherProbe()
        self._listeners: list[IdentityListener] = []
        self._unsubscribe: Unsubscribe | None = None
        self._current: Identity | None = None

    @property
    def current(self) -> Identity | None:
        """The last identity delivered by the provider."""
        return self._current

    @property
    def is_started(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        """Subscribe to the identity provider; calling twice is a no-op."""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._identity_provider.subscribe(self._on_provider_change)
        self._probe.watcher_started()

    def stop(self) -> None:
        """Unsubscribe from the identity provider; calling twice is a no-op."""
        if self._unsubscribe is None:
            return
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        unsubscribe()
        self._probe.watcher_stopped()

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener for identity changes.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def _on_provider_change(self, user: ProviderUser | None) -> None:
        identity = to_identity(user)
        if user is not None and identity is None:
            self._probe.blank_identity_ignored()
            return
        self._current = identity

        try:
            if identity is None:
                self._probe.identity_signed_out()
                self._tear_down()
            else:
                self._probe.identity_signed_in(user_id=identity.id)
        finally:
            for listener in list(self._listeners):
                listener(identity)

    def _tear_down(self) -> None:
        cached = self._company_cache.invalidate()
        for key in SESSION_KEYS:
            try:
                self._storage.remove(key)
            except OSError as e:
                self._probe.session_key_removal_failed(key=key, error=e)
        self._isolation_validator.cleanup_session_data(None)
        self._probe.session_state_torn_down(cached_tenants=cached)
