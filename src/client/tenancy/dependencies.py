"""Dependency wiring for the tenancy bounded context.

Composes infrastructure adapters (key-value store, scheduler) and
settings with the session engine components.
"""

from __future__ import annotations

from infrastructure.settings import SessionSettings, get_session_settings
from tenancy.application import (
    ActiveTenantSelector,
    CompanyCache,
    IdentityWatcher,
    IsolationValidator,
    SessionEngine,
    SessionGuard,
    TenantResolver,
)
from tenancy.infrastructure import (
    AsyncioScheduler,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from tenancy.ports.document_store import IDocumentStore
from tenancy.ports.identity import IIdentityProvider
from tenancy.ports.scheduling import ActivitySource, Scheduler
from tenancy.ports.storage import IKeyValueStore


def create_key_value_store(settings: SessionSettings) -> IKeyValueStore:
    """Create the persisted key-value store selected by settings.

    Uses a JSON file when ``storage_path`` is configured, otherwise an
    in-memory store whose hints are lost on restart.
    """
    if settings.storage_path is not None:
        return JsonFileKeyValueStore(settings.storage_path)
    return InMemoryKeyValueStore()


def create_session_engine(
    identity_provider: IIdentityProvider,
    document_store: IDocumentStore,
    storage: IKeyValueStore | None = None,
    scheduler: Scheduler | None = None,
    activity_source: ActivitySource | None = None,
    settings: SessionSettings | None = None,
) -> SessionEngine:
    """Build a fully wired session engine.

    Args:
        identity_provider: Adapter for the external identity provider
        document_store: Adapter for the remote document store
        storage: Persisted key-value store (default: from settings)
        scheduler: Timer scheduler for the session guard (default: asyncio loop)
        activity_source: Source of user activity signals, if the UI has one
        settings: Session settings (default: loaded from the environment)

    Returns:
        A SessionEngine; call ``start()`` inside the running event loop
    """
    settings = settings or get_session_settings()
    storage = storage if storage is not None else create_key_value_store(settings)

    isolation_validator = IsolationValidator(
        storage=storage,
        debug=settings.isolation_debug,
    )
    company_cache = CompanyCache(document_store=document_store)
    identity_watcher = IdentityWatcher(
        identity_provider=identity_provider,
        company_cache=company_cache,
        isolation_validator=isolation_validator,
        storage=storage,
    )
    resolver = TenantResolver(
        document_store=document_store,
        company_cache=company_cache,
        locale=settings.locale,
    )
    selector = ActiveTenantSelector(
        storage=storage,
        isolation_validator=isolation_validator,
    )
    guard = SessionGuard(
        identity_provider=identity_provider,
        scheduler=scheduler or AsyncioScheduler(),
        activity_source=activity_source,
        timeout_seconds=settings.inactivity_timeout_seconds,
    )
    return SessionEngine(
        identity_provider=identity_provider,
        identity_watcher=identity_watcher,
        resolver=resolver,
        selector=selector,
        guard=guard,
        isolation_validator=isolation_validator,
        storage=storage,
    )
