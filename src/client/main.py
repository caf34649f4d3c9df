"""Session engine entry point for the client shell."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from infrastructure.logging import configure_logging
from infrastructure.settings import SessionSettings, get_session_settings
from tenancy.application import SessionEngine
from tenancy.dependencies import create_session_engine
from tenancy.ports.document_store import IDocumentStore
from tenancy.ports.identity import IIdentityProvider
from tenancy.ports.scheduling import ActivitySource
from tenancy.ports.storage import IKeyValueStore


@asynccontextmanager
async def session_engine_lifespan(
    identity_provider: IIdentityProvider,
    document_store: IDocumentStore,
    storage: IKeyValueStore | None = None,
    activity_source: ActivitySource | None = None,
    settings: SessionSettings | None = None,
) -> AsyncIterator[SessionEngine]:
    """Session engine lifespan context.

    Manages:
    - Logging configuration
    - Identity provider subscription (started on enter, detached on exit)
    - Resolution and inactivity timer cleanup on shutdown
    """
    settings = settings or get_session_settings()
    configure_logging(min_level=settings.log_level_number, json_logs=settings.json_logs)

    engine = create_session_engine(
        identity_provider=identity_provider,
        document_store=document_store,
        storage=storage,
        activity_source=activity_source,
        settings=settings,
    )
    engine.start()
    try:
        yield engine
    finally:
        await engine.close()
