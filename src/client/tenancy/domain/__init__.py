"""Domain layer for the tenancy bounded context.

Holds the immutable model of identities, tenants, memberships and
sessions, together with the pure rules that govern them.
"""

from tenancy.domain.models import (
    Membership,
    OnboardingError,
    ResolutionState,
    Session,
    TenantProfile,
    UserProfile,
)
from tenancy.domain.permissions import can_write
from tenancy.domain.value_objects import (
    ActivitySignal,
    DataAccessAction,
    Identity,
    MembershipStatus,
    OnboardingReason,
    ResolutionPhase,
    Role,
    TenantStatus,
    WritableSection,
    is_valid_tenant_id,
)

__all__ = [
    "ActivitySignal",
    "DataAccessAction",
    "Identity",
    "Membership",
    "MembershipStatus",
    "OnboardingError",
    "OnboardingReason",
    "ResolutionPhase",
    "ResolutionState",
    "Role",
    "Session",
    "TenantProfile",
    "TenantStatus",
    "UserProfile",
    "WritableSection",
    "can_write",
    "is_valid_tenant_id",
]
