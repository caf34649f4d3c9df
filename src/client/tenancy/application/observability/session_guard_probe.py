"""Protocol for session guard observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

from tenancy.domain.value_objects import ActivitySignal

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SessionGuardProbe(Protocol):
    """Domain probe for the inactivity session guard."""

    def guard_armed(self, user_id: str, tenant_id: str, timeout_seconds: float) -> None:
        """Record that the inactivity timer started."""
        ...

    def guard_disarmed(self, reason: str) -> None:
        """Record that the inactivity timer was cancelled."""
        ...

    def activity_recorded(self, signal: ActivitySignal) -> None:
        """Record that user activity reset the inactivity timer."""
        ...

    def inactivity_timeout(self, user_id: str, tenant_id: str) -> None:
        """Record that the session expired through inactivity."""
        ...

    def forced_sign_out_failed(self, user_id: str, error: BaseException) -> None:
        """Record that the sign-out request after expiry failed."""
        ...

    def with_context(self, context: ObservationContext) -> SessionGuardProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSessionGuardProbe:
    """Default implementation of SessionGuardProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultSessionGuardProbe:
        """Create a new probe with observation context bound."""
        return DefaultSessionGuardProbe(logger=self._logger, context=context)

    def guard_armed(self, user_id: str, tenant_id: str, timeout_seconds: float) -> None:
        """Record that the inactivity timer started."""
        self._logger.debug(
            "session_guard_armed",
            user_id=user_id,
            tenant_id=tenant_id,
            timeout_seconds=timeout_seconds,
            **self._get_context_kwargs(),
        )

    def guard_disarmed(self, reason: str) -> None:
        """Record that the inactivity timer was cancelled."""
        self._logger.debug(
            "session_guard_disarmed",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def activity_recorded(self, signal: ActivitySignal) -> None:
        """Record that user activity reset the inactivity timer."""
        self._logger.debug(
            "session_activity_recorded",
            signal=signal.value,
            **self._get_context_kwargs(),
        )

    def inactivity_timeout(self, user_id: str, tenant_id: str) -> None:
        """Record that the session expired through inactivity."""
        self._logger.info(
            "session_inactivity_timeout",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def forced_sign_out_failed(self, user_id: str, error: BaseException) -> None:
        """Record that the sign-out request after expiry failed."""
        self._logger.error(
            "session_forced_sign_out_failed",
            user_id=user_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
