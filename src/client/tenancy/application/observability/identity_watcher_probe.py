"""Protocol for identity watcher observability.

Defines the interface for domain probes that capture sign-in and
sign-out transitions observed from the identity provider.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class IdentityWatcherProbe(Protocol):
    """Domain probe for identity watcher operations."""

    def watcher_started(self) -> None:
        """Record that the watcher subscribed to the identity provider."""
        ...

    def watcher_stopped(self) -> None:
        """Record that the watcher unsubscribed from the identity provider."""
        ...

    def identity_signed_in(self, user_id: str) -> None:
        """Record that an identity signed in."""
        ...

    def identity_signed_out(self) -> None:
        """Record that the identity signed out."""
        ...

    def session_state_torn_down(self, cached_tenants: int) -> None:
        """Record that cached tenants and persisted hints were cleared."""
        ...

    def session_key_removal_failed(self, key: str, error: BaseException) -> None:
        """Record that a persisted session key could not be removed on sign-out."""
        ...

    def blank_identity_ignored(self) -> None:
        """Record that the provider emitted a user without an id."""
        ...

    def with_context(self, context: ObservationContext) -> IdentityWatcherProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultIdentityWatcherProbe:
    """Default implementation of IdentityWatcherProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultIdentityWatcherProbe:
        """Create a new probe with observation context bound."""
        return DefaultIdentityWatcherProbe(logger=self._logger, context=context)

    def watcher_started(self) -> None:
        """Record that the watcher subscribed to the identity provider."""
        self._logger.debug("identity_watcher_started", **self._get_context_kwargs())

    def watcher_stopped(self) -> None:
        """Record that the watcher unsubscribed from the identity provider."""
        self._logger.debug("identity_watcher_stopped", **self._get_context_kwargs())

    def identity_signed_in(self, user_id: str) -> None:
        """Record that an identity signed in."""
        self._logger.info(
            "identity_signed_in",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def identity_signed_out(self) -> None:
        """Record that the identity signed out."""
        self._logger.info("identity_signed_out", **self._get_context_kwargs())

    def session_state_torn_down(self, cached_tenants: int) -> None:
        """Record that cached tenants and persisted hints were cleared."""
        self._logger.debug(
            "session_state_torn_down",
            cached_tenants=cached_tenants,
            **self._get_context_kwargs(),
        )

    def session_key_removal_failed(self, key: str, error: BaseException) -> None:
        """Record that a persisted session key could not be removed on sign-out."""
        self._logger.error(
            "session_key_removal_failed",
            key=key,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def blank_identity_ignored(self) -> None:
        """Record that the provider emitted a user without an id."""
        self._logger.warning("blank_identity_ignored", **self._get_context_kwargs())
