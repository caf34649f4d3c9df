"""Domain models for tenant resolution and session state.

Models are immutable: every change to a session produces a new instance,
so the invariants checked at construction hold for every value observed
by the rest of the client.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from tenancy.domain.exceptions import (
    ActiveTenantNotInMembershipsError,
    InvalidResolutionStateError,
)
from tenancy.domain.value_objects import (
    Identity,
    MembershipStatus,
    OnboardingReason,
    ResolutionPhase,
    Role,
    TenantStatus,
)


@dataclass(frozen=True)
class UserProfile:
    """Profile document linking a user to at most one tenant.

    Fetched on every resolution and never cached.
    """

    user_id: str
    tenant_id: str | None = None
    role: Role = Role.OWNER


@dataclass(frozen=True)
class TenantProfile:
    """Profile document of a tenant (company).

    Name and status are optional because the document store may hold
    partially provisioned tenants; see ``is_complete``.
    """

    tenant_id: str
    name: str | None = None
    status: TenantStatus | None = None

    @property
    def is_complete(self) -> bool:
        """Check that the tenant carries both a name and a status."""
        return bool(self.name) and self.status is not None


@dataclass(frozen=True)
class Membership:
    """Binding of an identity to a tenant with a role."""

    tenant_id: str
    tenant_name: str
    role: Role
    status: MembershipStatus = MembershipStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        """Check if the membership can be used to operate in the tenant."""
        return self.status == MembershipStatus.ACTIVE


@dataclass(frozen=True)
class Session:
    """Resolved session of an identity.

    Invariant: ``active_tenant_id``, when set, names one of ``memberships``.
    The active role is always derived from that membership so the two can
    never drift apart.
    """

    identity: Identity
    memberships: tuple[Membership, ...] = ()
    active_tenant_id: str | None = None

    def __post_init__(self) -> None:
        if (
            self.active_tenant_id is not None
            and self.membership_for(self.active_tenant_id) is None
        ):
            raise ActiveTenantNotInMembershipsError(self.active_tenant_id)

    @property
    def active_membership(self) -> Membership | None:
        """Get the membership of the active tenant, if one is selected."""
        if self.active_tenant_id is None:
            return None
        return self.membership_for(self.active_tenant_id)

    @property
    def active_role(self) -> Role | None:
        """Get the role held in the active tenant, if one is selected."""
        membership = self.active_membership
        return membership.role if membership is not None else None

    def membership_for(self, tenant_id: str) -> Membership | None:
        """Find the membership for a tenant, or None if the user has none."""
        for membership in self.memberships:
            if membership.tenant_id == tenant_id:
                return membership
        return None

    def has_membership(self, tenant_id: str) -> bool:
        """Check if the identity is a member of the tenant."""
        return self.membership_for(tenant_id) is not None

    def with_active_tenant(self, tenant_id: str) -> Session:
        """Create a new session with ``tenant_id`` selected.

        Raises:
            ActiveTenantNotInMembershipsError: If the tenant is not a membership
        """
        return replace(self, active_tenant_id=tenant_id)

    def without_active_tenant(self) -> Session:
        """Create a new session with no tenant selected."""
        return replace(self, active_tenant_id=None)


@dataclass(frozen=True)
class OnboardingError:
    """Blocking, non-fatal condition that prevented tenant resolution.

    This is a value surfaced to the user, not an exception.
    """

    reason: OnboardingReason
    message: str


@dataclass(frozen=True)
class ResolutionState:
    """The single externally observable state of tenant resolution.

    Use the factory class methods; ``__post_init__`` rejects combinations
    that would expose two states at once.
    """

    phase: ResolutionPhase
    identity: Identity | None = None
    session: Session | None = None
    onboarding_error: OnboardingError | None = field(default=None)

    def __post_init__(self) -> None:
        if self.session is not None and self.onboarding_error is not None:
            raise InvalidResolutionStateError(
                "A state cannot carry both a session and an onboarding error"
            )
        if (self.phase == ResolutionPhase.ONBOARDING_BLOCKED) != (
            self.onboarding_error is not None
        ):
            raise InvalidResolutionStateError(
                f"Onboarding error must be set exactly in the "
                f"{ResolutionPhase.ONBOARDING_BLOCKED} phase, got {self.phase}"
            )
        if self.phase in _SESSION_PHASES:
            if self.session is None:
                raise InvalidResolutionStateError(f"Phase {self.phase} requires a session")
            if self.phase != _phase_for_session(self.session):
                raise InvalidResolutionStateError(
                    f"Phase {self.phase} does not match the session"
                )
        elif self.session is not None:
            raise InvalidResolutionStateError(f"Phase {self.phase} cannot carry a session")
        if self.phase != ResolutionPhase.UNRESOLVED and self.identity is None:
            raise InvalidResolutionStateError(f"Phase {self.phase} requires an identity")

    @classmethod
    def unresolved(cls, identity: Identity | None = None) -> ResolutionState:
        """State before resolution, after sign-out, or after a dismissed error."""
        return cls(phase=ResolutionPhase.UNRESOLVED, identity=identity)

    @classmethod
    def resolving(cls, identity: Identity) -> ResolutionState:
        """State while the resolution pipeline runs for ``identity``."""
        return cls(phase=ResolutionPhase.RESOLVING, identity=identity)

    @classmethod
    def blocked(cls, identity: Identity, error: OnboardingError) -> ResolutionState:
        """State when resolution stopped on an onboarding error."""
        return cls(
            phase=ResolutionPhase.ONBOARDING_BLOCKED,
            identity=identity,
            onboarding_error=error,
        )

    @classmethod
    def platform_admin(cls, identity: Identity) -> ResolutionState:
        """Terminal state granting tenant-independent platform access."""
        return cls(phase=ResolutionPhase.PLATFORM_ADMIN, identity=identity)

    @classmethod
    def for_session(cls, session: Session) -> ResolutionState:
        """State derived from a resolved session."""
        return cls(
            phase=_phase_for_session(session),
            identity=session.identity,
            session=session,
        )

    @property
    def active_tenant_id(self) -> str | None:
        """Get the active tenant id; only ever set in the ``active`` phase."""
        if self.session is None:
            return None
        return self.session.active_tenant_id

    @property
    def active_role(self) -> Role | None:
        """Get the active role; only ever set in the ``active`` phase."""
        if self.session is None:
            return None
        return self.session.active_role

    @property
    def is_settled(self) -> bool:
        """Check if resolution has finished for the current identity."""
        return self.phase not in (ResolutionPhase.UNRESOLVED, ResolutionPhase.RESOLVING)


_SESSION_PHASES = frozenset(
    {
        ResolutionPhase.ACTIVE,
        ResolutionPhase.AWAITING_TENANT_CHOICE,
        ResolutionPhase.NO_MEMBERSHIP,
    }
)


def _phase_for_session(session: Session) -> ResolutionPhase:
    if session.active_tenant_id is not None:
        return ResolutionPhase.ACTIVE
    if session.memberships:
        return ResolutionPhase.AWAITING_TENANT_CHOICE
    return ResolutionPhase.NO_MEMBERSHIP
