"""Protocol for tenant resolver observability.

Defines the interface for domain probes that capture the steps of the
tenant resolution pipeline: platform admin detection, onboarding
blocks, membership fallbacks and resolved sessions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

from tenancy.domain.value_objects import OnboardingReason, Role

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantResolverProbe(Protocol):
    """Domain probe for tenant resolution."""

    def resolution_started(self, user_id: str) -> None:
        """Record that resolution started for an identity."""
        ...

    def platform_admin_check_failed(self, user_id: str, error: BaseException) -> None:
        """Record that the platform admin check failed and was treated as false."""
        ...

    def platform_admin_resolved(self, user_id: str) -> None:
        """Record that the identity resolved to platform admin access."""
        ...

    def onboarding_blocked(self, user_id: str, reason: OnboardingReason) -> None:
        """Record that resolution stopped on an onboarding error."""
        ...

    def collaborator_failure(
        self,
        user_id: str,
        operation: str,
        reason: OnboardingReason,
        error: BaseException,
    ) -> None:
        """Record that a document store read failed and how it was classified."""
        ...

    def membership_fallback(self, user_id: str, tenant_id: str, role: Role) -> None:
        """Record that a missing membership fell back to the profile role."""
        ...

    def session_resolved(self, user_id: str, tenant_id: str, role: Role) -> None:
        """Record that a session was resolved."""
        ...

    def with_context(self, context: ObservationContext) -> TenantResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantResolverProbe:
    """Default implementation of TenantResolverProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantResolverProbe(logger=self._logger, context=context)

    def resolution_started(self, user_id: str) -> None:
        """Record that resolution started for an identity."""
        self._logger.debug(
            "tenant_resolution_started",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def platform_admin_check_failed(self, user_id: str, error: BaseException) -> None:
        """Record that the platform admin check failed and was treated as false."""
        self._logger.warning(
            "platform_admin_check_failed",
            user_id=user_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def platform_admin_resolved(self, user_id: str) -> None:
        """Record that the identity resolved to platform admin access."""
        self._logger.info(
            "platform_admin_resolved",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def onboarding_blocked(self, user_id: str, reason: OnboardingReason) -> None:
        """Record that resolution stopped on an onboarding error."""
        self._logger.warning(
            "tenant_resolution_blocked",
            user_id=user_id,
            reason=reason.value,
            **self._get_context_kwargs(),
        )

    def collaborator_failure(
        self,
        user_id: str,
        operation: str,
        reason: OnboardingReason,
        error: BaseException,
    ) -> None:
        """Record that a document store read failed and how it was classified."""
        self._logger.error(
            "tenant_resolution_collaborator_failure",
            user_id=user_id,
            operation=operation,
            reason=reason.value,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def membership_fallback(self, user_id: str, tenant_id: str, role: Role) -> None:
        """Record that a missing membership fell back to the profile role."""
        self._logger.info(
            "membership_fallback_to_profile_role",
            user_id=user_id,
            tenant_id=tenant_id,
            role=role.value,
            **self._get_context_kwargs(),
        )

    def session_resolved(self, user_id: str, tenant_id: str, role: Role) -> None:
        """Record that a session was resolved."""
        self._logger.info(
            "tenant_session_resolved",
            user_id=user_id,
            tenant_id=tenant_id,
            role=role.value,
            **self._get_context_kwargs(),
        )
