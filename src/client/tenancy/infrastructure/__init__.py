"""Infrastructure adapters for the tenancy bounded context."""

from tenancy.infrastructure.asyncio_scheduler import AsyncioScheduler
from tenancy.infrastructure.key_value_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)

__all__ = [
    "AsyncioScheduler",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
