"""Local key-value store port.

Persisted entries are advisory UI hints that outlive process restarts.
They are never trusted as a source of authorization.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

ACTIVE_TENANT_ID_KEY = "active-tenant-id"
ACTIVE_ROLE_KEY = "active-role"
COMPANY_CACHE_KEY = "company-cache"
USER_PERMISSIONS_KEY = "user-permissions"

SESSION_KEYS: tuple[str, ...] = (
    ACTIVE_TENANT_ID_KEY,
    ACTIVE_ROLE_KEY,
    COMPANY_CACHE_KEY,
    USER_PERMISSIONS_KEY,
)


@runtime_checkable
class IKeyValueStore(Protocol):
    """Synchronous string-keyed store."""

    def get(self, key: str) -> str | None:
        """Get the value stored under ``key``, or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Remove ``key``; removing a missing key is a no-op."""
        ...
