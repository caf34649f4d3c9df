"""Application layer for the tenancy bounded context.

Components of the session engine, in dependency order: identity
watcher, company cache, tenant resolver, active tenant selector,
session guard and isolation validator, composed by ``SessionEngine``.
"""

from tenancy.application.company_cache import CompanyCache
from tenancy.application.identity_watcher import IdentityWatcher
from tenancy.application.isolation_validator import IsolationCheck, IsolationValidator
from tenancy.application.session_engine import SessionEngine
from tenancy.application.session_guard import GuardState, SessionGuard
from tenancy.application.tenant_resolver import (
    PlatformAdminAccess,
    ResolutionOutcome,
    TenantResolver,
)
from tenancy.application.tenant_selector import ActiveTenantSelector

__all__ = [
    "ActiveTenantSelector",
    "CompanyCache",
    "GuardState",
    "IdentityWatcher",
    "IsolationCheck",
    "IsolationValidator",
    "PlatformAdminAccess",
    "ResolutionOutcome",
    "SessionEngine",
    "SessionGuard",
    "TenantResolver",
]
