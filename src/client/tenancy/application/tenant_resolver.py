"""Tenant resolver.

Turns a signed-in identity into exactly one resolution outcome: a
``Session``, an ``OnboardingError`` or ``PlatformAdminAccess``. The
pipeline short-circuits on the first failing step and runs independent
document store reads concurrently. It holds no per-identity state, so
it is safe to re-run in full on every identity change.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Iterable, TypeAlias

from shared_kernel.observability_context import ObservationContext
from tenancy.application.company_cache import CompanyCache
from tenancy.application.error_classification import classify_failure
from tenancy.application.messages import DEFAULT_LOCALE, onboarding_error
from tenancy.application.observability import (
    DefaultTenantResolverProbe,
    TenantResolverProbe,
)
from tenancy.domain.models import Membership, OnboardingError, Session
from tenancy.domain.value_objects import (
    Identity,
    MembershipStatus,
    OnboardingReason,
    TenantStatus,
)
from tenancy.ports.document_store import IDocumentStore


@dataclass(frozen=True)
class PlatformAdminAccess:
    """Tenant-independent access granted to platform administrators."""

    identity: Identity


ResolutionOutcome: TypeAlias = Session | OnboardingError | PlatformAdminAccess

_STATUS_REASONS: dict[TenantStatus, OnboardingReason] = {
    TenantStatus.PENDING: OnboardingReason.TENANT_PENDING,
    TenantStatus.REJECTED: OnboardingReason.TENANT_REJECTED,
}


def choose_active_tenant(
    memberships: Iterable[Membership], persisted_tenant_id: str | None
) -> str | None:
    """Pick the active tenant for a freshly resolved session.

    A single membership is selected automatically. With several, the
    persisted hint is honoured only when it names one of them; otherwise
    the user has to choose.
    """
    memberships = tuple(memberships)
    if len(memberships) == 1:
        return memberships[0].tenant_id
    if persisted_tenant_id and any(m.tenant_id == persisted_tenant_id for m in memberships):
        return persisted_tenant_id
    return None


def _reraise_cancellation(result: Any) -> Any:
    if isinstance(result, BaseException) and not isinstance(result, Exception):
        raise result
    return result


class TenantResolver:
    """Resolves the tenant, role and session of an identity."""

    def __init__(
        self,
        document_store: IDocumentStore,
        company_cache: CompanyCache,
        probe: TenantResolverProbe | None = None,
        locale: str = DEFAULT_LOCALE,
    ):
        self._document_store = document_store
        self._company_cache = company_cache
        self._probe = probe or DefaultTenantResolverProbe()
        self._locale = locale

    async def resolve(
        self,
        identity: Identity,
        persisted_tenant_id: str | None = None,
        context: ObservationContext | None = None,
    ) -> ResolutionOutcome:
        """Run the resolution pipeline for an identity.

        Args:
            identity: The signed-in identity
            persisted_tenant_id: Advisory hint of the last active tenant
            context: Observation context of this resolution run

        Returns:
            PlatformAdminAccess for platform administrators, otherwise a
            Session with one membership or the OnboardingError that stopped
            resolution. Collaborator failures never escape as exceptions.
        """
        probe = self._probe.with_context(context) if context is not None else self._probe
        user_id = identity.id
        probe.resolution_started(user_id=user_id)

        is_admin, profile = await asyncio.gather(
            self._document_store.check_platform_admin(user_id),
            self._document_store.get_user_profile(user_id),
            return_exceptions=True,
        )
        is_admin = _reraise_cancellation(is_admin)
        profile = _reraise_cancellation(profile)

        if isinstance(is_admin, Exception):
            probe.platform_admin_check_failed(user_id=user_id, error=is_admin)
            is_admin = False
        if is_admin is True:
            probe.platform_admin_resolved(user_id=user_id)
            return PlatformAdminAccess(identity=identity)

        if isinstance(profile, Exception):
            return self._failure(probe, user_id, "get_user_profile", profile)
        if profile is None:
            return self._blocked(probe, user_id, OnboardingReason.NO_PROFILE)
        if not profile.tenant_id:
            return self._blocked(probe, user_id, OnboardingReason.NO_TENANT_LINK)

        tenant_id = profile.tenant_id
        tenant, membership = await asyncio.gather(
            self._company_cache.get(tenant_id),
            self._document_store.get_membership(tenant_id, user_id),
            return_exceptions=True,
        )
        tenant = _reraise_cancellation(tenant)
        membership = _reraise_cancellation(membership)

        if isinstance(tenant, Exception):
            return self._failure(probe, user_id, "get_tenant", tenant)
        if tenant is None:
            return self._blocked(probe, user_id, OnboardingReason.TENANT_NOT_FOUND)
        if not tenant.is_complete:
            return self._blocked(probe, user_id, OnboardingReason.TENANT_INCOMPLETE)
        if tenant.status in _STATUS_REASONS:
            return self._blocked(probe, user_id, _STATUS_REASONS[tenant.status])

        if isinstance(membership, Exception):
            return self._failure(probe, user_id, "get_membership", membership)
        if membership is None:
            role = profile.role
            probe.membership_fallback(user_id=user_id, tenant_id=tenant_id, role=role)
        elif not membership.is_active:
            return self._blocked(probe, user_id, OnboardingReason.PERMISSION_DENIED)
        else:
            role = membership.role

        resolved = Membership(
            tenant_id=tenant_id,
            tenant_name=tenant.name,
            role=role,
            status=MembershipStatus.ACTIVE,
        )
        memberships = (resolved,)
        session = Session(
            identity=identity,
            memberships=memberships,
            active_tenant_id=choose_active_tenant(memberships, persisted_tenant_id),
        )
        probe.session_resolved(user_id=user_id, tenant_id=tenant_id, role=role)
        return session

    def _blocked(
        self, probe: TenantResolverProbe, user_id: str, reason: OnboardingReason
    ) -> OnboardingError:
        probe.onboarding_blocked(user_id=user_id, reason=reason)
        return onboarding_error(reason, self._locale)

    def _failure(
        self,
        probe: TenantResolverProbe,
        user_id: str,
        operation: str,
        error: Exception,
    ) -> OnboardingError:
        reason = classify_failure(error)
        probe.collaborator_failure(
            user_id=user_id,
            operation=operation,
            reason=reason,
            error=error,
        )
        return onboarding_error(reason, self._locale)
