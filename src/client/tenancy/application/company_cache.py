"""Process-lifetime read-through cache of tenant profiles.

Entries never expire while a session lives; the identity watcher drops
them all on sign-out. Concurrent misses for the same tenant both fetch
and the last write wins, which is safe because a tenant id always maps
to the same profile.
"""

from __future__ import annotations

from tenancy.application.observability import CompanyCacheProbe, DefaultCompanyCacheProbe
from tenancy.domain.models import TenantProfile
from tenancy.ports.document_store import IDocumentStore


class CompanyCache:
    """Read-through cache mapping tenant id to tenant profile."""

    def __init__(
        self,
        document_store: IDocumentStore,
        probe: CompanyCacheProbe | None = None,
    ):
        self._document_store = document_store
        self._probe = probe or DefaultCompanyCacheProbe()
        self._entries: dict[str, TenantProfile] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._entries

    async def get(self, tenant_id: str) -> TenantProfile | None:
        """Get a tenant profile, fetching it remotely on a miss.

        Missing tenants are not cached, so a tenant created later is found
        on the next resolution.

        Args:
            tenant_id: The tenant document id

        Returns:
            The TenantProfile, or None if the store has no such tenant

        Raises:
            Exception: Whatever the document store raises; nothing is cached
        """
        cached = self._entries.get(tenant_id)
        if cached is not None:
            self._probe.cache_hit(tenant_id=tenant_id)
            return cached

        self._probe.cache_miss(tenant_id=tenant_id)
        tenant = await self._document_store.get_tenant(tenant_id)
        if tenant is not None:
            self._entries[tenant_id] = tenant
            self._probe.cache_populated(tenant_id=tenant_id)
        return tenant

    def invalidate(self) -> int:
        """Drop every cached profile.

        Returns:
            The number of entries dropped
        """
        count = len(self._entries)
        self._entries.clear()
        self._probe.cache_invalidated(count=count)
        return count
