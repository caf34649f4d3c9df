"""Value objects for the tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identities, roles and tenant lifecycle states.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

_TENANT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


@dataclass(frozen=True)
class Identity:
    """Minimal view of an authenticated user delivered by the identity provider.

    Identity is owned by the IdentityWatcher; every other component treats
    it as read-only.
    """

    id: str
    email: str | None = None
    display_name: str | None = None

    def __str__(self) -> str:
        """Return string representation."""
        return self.id

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Identity id must not be empty")


class Role(StrEnum):
    """Roles a user can hold within a tenant.

    Owner and Manager share the top privilege rank for write checks.
    """

    OWNER = "owner"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    VIEWER = "viewer"

    @property
    def rank(self) -> int:
        """Privilege rank used for write-permission comparisons."""
        return _ROLE_RANKS[self]

    def at_least(self, other: Role) -> bool:
        """Check if this role is at least as privileged as ``other``."""
        return self.rank >= other.rank


_ROLE_RANKS: dict[Role, int] = {
    Role.OWNER: 3,
    Role.MANAGER: 3,
    Role.EMPLOYEE: 2,
    Role.VIEWER: 1,
}


class TenantStatus(StrEnum):
    """Approval lifecycle of a tenant (company) account."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MembershipStatus(StrEnum):
    """Status of a user's membership record within a tenant."""

    ACTIVE = "active"
    DISABLED = "disabled"


class WritableSection(StrEnum):
    """Functional sections of the client guarded by write permissions."""

    INVOICES = "invoices"
    CUSTOMERS = "customers"
    PRODUCTS = "products"
    EXPENSES = "expenses"
    SETTINGS = "settings"
    USERS = "users"
    QUOTES = "quotes"
    RECURRING = "recurring"
    PAYMENTS = "payments"
    REPORTS = "reports"


class OnboardingReason(StrEnum):
    """Tagged reasons that block tenant resolution for an identity."""

    NO_PROFILE = "no_profile"
    NO_TENANT_LINK = "no_tenant_link"
    TENANT_NOT_FOUND = "tenant_not_found"
    TENANT_INCOMPLETE = "tenant_incomplete"
    TENANT_PENDING = "tenant_pending"
    TENANT_REJECTED = "tenant_rejected"
    NETWORK_UNREACHABLE = "network_unreachable"
    PERMISSION_DENIED = "permission_denied"
    UNKNOWN = "unknown"

    @property
    def is_transport(self) -> bool:
        """Check if the reason stems from a collaborator failure."""
        return self in (
            OnboardingReason.NETWORK_UNREACHABLE,
            OnboardingReason.PERMISSION_DENIED,
            OnboardingReason.UNKNOWN,
        )


class ResolutionPhase(StrEnum):
    """Externally observable phases of tenant resolution."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    ONBOARDING_BLOCKED = "onboarding_blocked"
    PLATFORM_ADMIN = "platform_admin"
    AWAITING_TENANT_CHOICE = "awaiting_tenant_choice"
    NO_MEMBERSHIP = "no_membership"
    ACTIVE = "active"


class ActivitySignal(StrEnum):
    """User activity signals that keep an idle session alive."""

    POINTER_DOWN = "pointer_down"
    KEY_DOWN = "key_down"
    SCROLL = "scroll"


class DataAccessAction(StrEnum):
    """Kinds of tenant data access recorded for auditing."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    EXPORT = "export"


def is_valid_tenant_id(tenant_id: object) -> bool:
    """Check that a tenant id looks like a document-store identifier.

    Letters, digits, hyphens and underscores only, 1 to 64 characters.
    """
    if not isinstance(tenant_id, str):
        return False
    return _TENANT_ID_PATTERN.fullmatch(tenant_id) is not None
