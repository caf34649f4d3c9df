"""Protocol for tenant isolation observability.

Isolation events double as the audit trail of tenant data access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

from tenancy.domain.value_objects import DataAccessAction

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class IsolationProbe(Protocol):
    """Domain probe for isolation checks and session data cleanup."""

    def isolation_check_failed(
        self, user_id: str, tenant_id: str, errors: list[str]
    ) -> None:
        """Record that an isolation check produced errors."""
        ...

    def persisted_tenant_mismatch(
        self, user_id: str, tenant_id: str, persisted_tenant_id: str
    ) -> None:
        """Record that the persisted active tenant differs from the session."""
        ...

    def unsafe_data_access(self, user_id: str, tenant_id: str) -> None:
        """Record that data access was refused for missing or placeholder ids."""
        ...

    def data_access_recorded(
        self,
        action: DataAccessAction,
        resource: str,
        user_id: str,
        tenant_id: str,
        details: dict[str, Any],
    ) -> None:
        """Record an audited access to tenant data."""
        ...

    def session_data_cleaned(
        self, tenant_id_to_keep: str | None, removed_keys: list[str]
    ) -> None:
        """Record that persisted session data was cleaned up."""
        ...

    def session_cleanup_failed(
        self, tenant_id_to_keep: str | None, error: BaseException
    ) -> None:
        """Record that persisted session data could not be cleaned up."""
        ...

    def isolation_state_summarized(self, summary: dict[str, Any]) -> None:
        """Record a diagnostic summary of the isolation state."""
        ...

    def with_context(self, context: ObservationContext) -> IsolationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultIsolationProbe:
    """Default implementation of IsolationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultIsolationProbe:
        """Create a new probe with observation context bound."""
        return DefaultIsolationProbe(logger=self._logger, context=context)

    def isolation_check_failed(
        self, user_id: str, tenant_id: str, errors: list[str]
    ) -> None:
        """Record that an isolation check produced errors."""
        self._logger.warning(
            "isolation_check_failed",
            user_id=user_id,
            tenant_id=tenant_id,
            errors=errors,
            **self._get_context_kwargs(),
        )

    def persisted_tenant_mismatch(
        self, user_id: str, tenant_id: str, persisted_tenant_id: str
    ) -> None:
        """Record that the persisted active tenant differs from the session."""
        self._logger.warning(
            "isolation_persisted_tenant_mismatch",
            user_id=user_id,
            tenant_id=tenant_id,
            persisted_tenant_id=persisted_tenant_id,
            **self._get_context_kwargs(),
        )

    def unsafe_data_access(self, user_id: str, tenant_id: str) -> None:
        """Record that data access was refused for missing or placeholder ids."""
        self._logger.error(
            "isolation_unsafe_data_access",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def data_access_recorded(
        self,
        action: DataAccessAction,
        resource: str,
        user_id: str,
        tenant_id: str,
        details: dict[str, Any],
    ) -> None:
        """Record an audited access to tenant data."""
        self._logger.info(
            "tenant_data_access",
            action=action.value,
            resource=resource,
            user_id=user_id,
            tenant_id=tenant_id,
            **details,
            **self._get_context_kwargs(),
        )

    def session_data_cleaned(
        self, tenant_id_to_keep: str | None, removed_keys: list[str]
    ) -> None:
        """Record that persisted session data was cleaned up."""
        self._logger.debug(
            "session_data_cleaned",
            tenant_id_to_keep=tenant_id_to_keep,
            removed_keys=removed_keys,
            **self._get_context_kwargs(),
        )

    def isolation_state_summarized(self, summary: dict[str, Any]) -> None:
        """Record a diagnostic summary of the isolation state."""
        self._logger.debug(
            "isolation_state_summary",
            **summary,
            **self._get_context_kwargs(),
        )

    def session_cleanup_failed(
        self, tenant_id_to_keep: str | None, error: BaseException
    ) -> None:
        """Record that persisted session data could not be cleaned up."""
        self._logger.warning(
            "session_cleanup_failed",
            tenant_id_to_keep=tenant_id_to_keep,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
