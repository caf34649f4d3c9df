"""Domain-Oriented Observability for the tenancy application layer.

Probes for session engine components following Domain-Oriented Observability patterns.
"""

from tenancy.application.observability.company_cache_probe import (
    CompanyCacheProbe,
    DefaultCompanyCacheProbe,
)
from tenancy.application.observability.identity_watcher_probe import (
    DefaultIdentityWatcherProbe,
    IdentityWatcherProbe,
)
from tenancy.application.observability.isolation_probe import (
    DefaultIsolationProbe,
    IsolationProbe,
)
from tenancy.application.observability.session_engine_probe import (
    DefaultSessionEngineProbe,
    SessionEngineProbe,
)
from tenancy.application.observability.session_guard_probe import (
    DefaultSessionGuardProbe,
    SessionGuardProbe,
)
from tenancy.application.observability.tenant_resolver_probe import (
    DefaultTenantResolverProbe,
    TenantResolverProbe,
)
from tenancy.application.observability.tenant_selector_probe import (
    DefaultTenantSelectorProbe,
    TenantSelectorProbe,
)

__all__ = [
    "CompanyCacheProbe",
    "DefaultCompanyCacheProbe",
    "IdentityWatcherProbe",
    "DefaultIdentityWatcherProbe",
    "IsolationProbe",
    "DefaultIsolationProbe",
    "SessionEngineProbe",
    "DefaultSessionEngineProbe",
    "SessionGuardProbe",
    "DefaultSessionGuardProbe",
    "TenantResolverProbe",
    "DefaultTenantResolverProbe",
    "TenantSelectorProbe",
    "DefaultTenantSelectorProbe",
]
