"""Protocol for company cache observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CompanyCacheProbe(Protocol):
    """Domain probe for company cache operations."""

    def cache_hit(self, tenant_id: str) -> None:
        """Record that a tenant profile was served from the cache."""
        ...

    def cache_miss(self, tenant_id: str) -> None:
        """Record that a tenant profile had to be fetched remotely."""
        ...

    def cache_populated(self, tenant_id: str) -> None:
        """Record that a fetched tenant profile was stored."""
        ...

    def cache_invalidated(self, count: int) -> None:
        """Record that all cached tenant profiles were dropped."""
        ...

    def with_context(self, context: ObservationContext) -> CompanyCacheProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCompanyCacheProbe:
    """Default implementation of CompanyCacheProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCompanyCacheProbe:
        """Create a new probe with observation context bound."""
        return DefaultCompanyCacheProbe(logger=self._logger, context=context)

    def cache_hit(self, tenant_id: str) -> None:
        """Record that a tenant profile was served from the cache."""
        self._logger.debug(
            "company_cache_hit",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def cache_miss(self, tenant_id: str) -> None:
        """Record that a tenant profile had to be fetched remotely."""
        self._logger.debug(
            "company_cache_miss",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def cache_populated(self, tenant_id: str) -> None:
        """Record that a fetched tenant profile was stored."""
        self._logger.debug(
            "company_cache_populated",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def cache_invalidated(self, count: int) -> None:
        """Record that all cached tenant profiles were dropped."""
        self._logger.info(
            "company_cache_invalidated",
            count=count,
            **self._get_context_kwargs(),
        )
