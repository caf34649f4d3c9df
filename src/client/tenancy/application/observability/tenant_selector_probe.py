"""Protocol for active tenant selection observability.

Rejected selections are security-relevant: they are never raised to the
UI, so these probe events are the only record of an attempted
unauthorized tenant switch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

from tenancy.domain.value_objects import Role

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantSelectorProbe(Protocol):
    """Domain probe for active tenant selection."""

    def tenant_selected(self, user_id: str, tenant_id: str, role: Role) -> None:
        """Record that the user selected an active tenant."""
        ...

    def tenant_deselected(self, user_id: str) -> None:
        """Record that the user cleared the active tenant."""
        ...

    def unauthorized_tenant_switch(self, user_id: str, tenant_id: str) -> None:
        """Record an attempt to select a tenant outside the user's memberships."""
        ...

    def malformed_tenant_id(self, user_id: str | None, raw_value: str) -> None:
        """Record an attempt to select a malformed tenant id."""
        ...

    def selection_without_session(self, tenant_id: str | None) -> None:
        """Record an attempt to select a tenant before a session exists."""
        ...

    def selection_persist_failed(self, user_id: str, error: BaseException) -> None:
        """Record that the selected tenant could not be persisted as a hint."""
        ...

    def with_context(self, context: ObservationContext) -> TenantSelectorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantSelectorProbe:
    """Default implementation of TenantSelectorProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantSelectorProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantSelectorProbe(logger=self._logger, context=context)

    def tenant_selected(self, user_id: str, tenant_id: str, role: Role) -> None:
        """Record that the user selected an active tenant."""
        self._logger.info(
            "active_tenant_selected",
            user_id=user_id,
            tenant_id=tenant_id,
            role=role.value,
            **self._get_context_kwargs(),
        )

    def tenant_deselected(self, user_id: str) -> None:
        """Record that the user cleared the active tenant."""
        self._logger.info(
            "active_tenant_deselected",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def unauthorized_tenant_switch(self, user_id: str, tenant_id: str) -> None:
        """Record an attempt to select a tenant outside the user's memberships."""
        self._logger.warning(
            "unauthorized_tenant_switch_rejected",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def malformed_tenant_id(self, user_id: str | None, raw_value: str) -> None:
        """Record an attempt to select a malformed tenant id."""
        self._logger.warning(
            "malformed_tenant_id_rejected",
            user_id=user_id,
            raw_value=raw_value,
            **self._get_context_kwargs(),
        )

    def selection_without_session(self, tenant_id: str | None) -> None:
        """Record an attempt to select a tenant before a session exists."""
        self._logger.warning(
            "tenant_selection_without_session",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def selection_persist_failed(self, user_id: str, error: BaseException) -> None:
        """Record that the selected tenant could not be persisted as a hint."""
        self._logger.warning(
            "tenant_selection_persist_failed",
            user_id=user_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
