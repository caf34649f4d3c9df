"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from ulid import ULID


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures the metadata of one tenant resolution (or one user action on
    a resolved session) so that every probe event it produces can be
    correlated.

    Attributes:
        resolution_id: Correlation id of the resolution run (a ULID).
        user_id: Identity id of the user (if known).
        tenant_id: Tenant being resolved or operated in (if known).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext.for_resolution()
        probe = DefaultTenantResolverProbe().with_context(context)
    """

    resolution_id: str | None = None
    user_id: str | None = None
    tenant_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_resolution(cls) -> ObservationContext:
        """Create a context for a new resolution run with a fresh ULID.

        Probe methods already take the user and tenant ids as arguments,
        so only the correlation id is bound here.
        """
        return cls(resolution_id=str(ULID()))

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.resolution_id is not None:
            result["resolution_id"] = self.resolution_id
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_id: str) -> ObservationContext:
        """Create a new context with the tenant id set."""
        return replace(self, tenant_id=tenant_id)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
