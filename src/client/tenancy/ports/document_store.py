"""Document store port.

Read-only access to the profile, tenant and membership documents the
session engine needs. Every method returns the entity or None when it
does not exist; failures are raised as exceptions (typed
``DocumentStoreError`` subclasses or arbitrary SDK errors).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tenancy.domain.models import Membership, TenantProfile, UserProfile


@runtime_checkable
class IDocumentStore(Protocol):
    """Remote document store holding tenancy documents."""

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        """Retrieve the profile document of a user.

        Args:
            user_id: The identity id of the user

        Returns:
            The UserProfile, or None if the user has no profile
        """
        ...

    async def get_tenant(self, tenant_id: str) -> TenantProfile | None:
        """Retrieve a tenant profile.

        Args:
            tenant_id: The tenant document id

        Returns:
            The TenantProfile, or None if not found
        """
        ...

    async def get_membership(self, tenant_id: str, user_id: str) -> Membership | None:
        """Retrieve the membership of a user within a tenant.

        Args:
            tenant_id: The tenant document id
            user_id: The identity id of the user

        Returns:
            The Membership, or None if the user has no membership record
        """
        ...

    async def check_platform_admin(self, user_id: str) -> bool:
        """Check if the user is a platform administrator."""
        ...
