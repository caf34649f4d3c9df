"""Protocol for session engine observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

from tenancy.domain.value_objects import ResolutionPhase

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SessionEngineProbe(Protocol):
    """Domain probe for the session engine facade."""

    def state_changed(self, phase: ResolutionPhase, user_id: str | None) -> None:
        """Record that the observable resolution state changed."""
        ...

    def resolution_superseded(self, user_id: str | None, token: int) -> None:
        """Record that an in-flight resolution was cancelled by a newer identity event."""
        ...

    def stale_resolution_discarded(self, user_id: str, token: int) -> None:
        """Record that a finished resolution was ignored because it is stale."""
        ...

    def onboarding_error_cleared(self, user_id: str) -> None:
        """Record that the user dismissed an onboarding error."""
        ...

    def sign_out_requested(self, user_id: str | None) -> None:
        """Record that the user asked to sign out."""
        ...

    def persisted_hint_unreadable(self, user_id: str, error: BaseException) -> None:
        """Record that the persisted active tenant could not be read."""
        ...

    def with_context(self, context: ObservationContext) -> SessionEngineProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSessionEngineProbe:
    """Default implementation of SessionEngineProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultSessionEngineProbe:
        """Create a new probe with observation context bound."""
        return DefaultSessionEngineProbe(logger=self._logger, context=context)

    def state_changed(self, phase: ResolutionPhase, user_id: str | None) -> None:
        """Record that the observable resolution state changed."""
        self._logger.debug(
            "session_state_changed",
            phase=phase.value,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def resolution_superseded(self, user_id: str | None, token: int) -> None:
        """Record that an in-flight resolution was cancelled by a newer identity event."""
        self._logger.debug(
            "tenant_resolution_superseded",
            user_id=user_id,
            token=token,
            **self._get_context_kwargs(),
        )

    def stale_resolution_discarded(self, user_id: str, token: int) -> None:
        """Record that a finished resolution was ignored because it is stale."""
        self._logger.debug(
            "stale_tenant_resolution_discarded",
            user_id=user_id,
            token=token,
            **self._get_context_kwargs(),
        )

    def onboarding_error_cleared(self, user_id: str) -> None:
        """Record that the user dismissed an onboarding error."""
        self._logger.info(
            "onboarding_error_cleared",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def sign_out_requested(self, user_id: str | None) -> None:
        """Record that the user asked to sign out."""
        self._logger.info(
            "sign_out_requested",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def persisted_hint_unreadable(self, user_id: str, error: BaseException) -> None:
        """Record that the persisted active tenant could not be read."""
        self._logger.warning(
            "persisted_tenant_hint_unreadable",
            user_id=user_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
