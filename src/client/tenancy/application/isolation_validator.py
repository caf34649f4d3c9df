"""Tenant isolation checks and persisted session data cleanup.

Persisted session hints are advisory, so a disagreement between the
persisted active tenant and the in-memory session is a warning, never
an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from tenancy.application.observability import DefaultIsolationProbe, IsolationProbe
from tenancy.domain.value_objects import DataAccessAction, Identity
from tenancy.ports.storage import (
    ACTIVE_ROLE_KEY,
    ACTIVE_TENANT_ID_KEY,
    SESSION_KEYS,
    IKeyValueStore,
)

NOT_AUTHENTICATED_ERROR = "User not authenticated"
NO_ACTIVE_COMPANY_ERROR = "No active company ID set"
STORAGE_UNREADABLE_WARNING = "Could not verify stored company ID (storage issue)"

_UNKNOWN = "unknown"
_PLACEHOLDER_IDS = frozenset({"", "null", "undefined", "none"})


@dataclass
class IsolationCheck:
    """Outcome of an isolation check.

    ``is_valid`` is true exactly when ``errors`` is empty; warnings never
    affect validity.
    """

    user_id: str
    company_id: str
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class IsolationValidator:
    """Consistency checks between persisted and in-memory tenant selection."""

    def __init__(
        self,
        storage: IKeyValueStore,
        probe: IsolationProbe | None = None,
        debug: bool = False,
    ):
        self._storage = storage
        self._probe = probe or DefaultIsolationProbe()
        self._debug = debug

    def validate(self, identity: Identity | None, tenant_id: str | None) -> IsolationCheck:
        """Check that a session is isolated to a single tenant.

        Args:
            identity: The signed-in identity, or None
            tenant_id: The in-memory active tenant, or None

        Returns:
            IsolationCheck with errors for a missing identity or tenant and
            a warning when the persisted active tenant differs
        """
        check = IsolationCheck(
            user_id=identity.id if identity is not None else _UNKNOWN,
            company_id=tenant_id or _UNKNOWN,
        )

        if identity is None:
            check.errors.append(NOT_AUTHENTICATED_ERROR)
        elif not tenant_id:
            check.errors.append(NO_ACTIVE_COMPANY_ERROR)
        else:
            try:
                persisted = self._storage.get(ACTIVE_TENANT_ID_KEY)
            except OSError:
                check.warnings.append(STORAGE_UNREADABLE_WARNING)
            else:
                if persisted and persisted != tenant_id:
                    check.warnings.append(
                        f"Active company ID mismatch: storage has {persisted}, "
                        f"context has {tenant_id}"
                    )
                    self._probe.persisted_tenant_mismatch(
                        user_id=check.user_id,
                        tenant_id=tenant_id,
                        persisted_tenant_id=persisted,
                    )

        if check.errors:
            self._probe.isolation_check_failed(
                user_id=check.user_id,
                tenant_id=check.company_id,
                errors=list(check.errors),
            )
        if self._debug:
            self._probe.isolation_state_summarized(self.state_summary())
        return check

    def is_safe_to_access(self, user_id: str | None, tenant_id: str | None) -> bool:
        """Check that tenant data may be read or written for these ids.

        Rejects missing ids and placeholder strings such as ``"null"`` that
        would scope a query to no tenant at all.
        """
        if (
            not user_id
            or not tenant_id
            or tenant_id.strip().lower() in _PLACEHOLDER_IDS
        ):
            self._probe.unsafe_data_access(
                user_id=user_id or _UNKNOWN,
                tenant_id=tenant_id if tenant_id is not None else _UNKNOWN,
            )
            return False
        return True

    def record_data_access(
        self,
        action: DataAccessAction | str,
        resource: str,
        user_id: str,
        tenant_id: str,
        **details: Any,
    ) -> None:
        """Record an access to tenant data in the audit trail."""
        self._probe.data_access_recorded(
            action=DataAccessAction(action),
            resource=resource,
            user_id=user_id,
            tenant_id=tenant_id,
            details=details,
        )

    def cleanup_session_data(self, tenant_id_to_keep: str | None = None) -> list[str]:
        """Remove persisted session data that does not belong to a tenant.

        With ``None`` the persisted active tenant is removed. With a tenant
        id, every session key whose stored value does not contain that id
        is removed. Running it twice leaves the store unchanged. A storage
        failure stops the cleanup and is logged, never raised.

        Args:
            tenant_id_to_keep: Tenant whose data survives, or None

        Returns:
            The keys that were removed
        """
        removed: list[str] = []
        try:
            if tenant_id_to_keep is None:
                if self._storage.get(ACTIVE_TENANT_ID_KEY) is not None:
                    self._storage.remove(ACTIVE_TENANT_ID_KEY)
                    removed.append(ACTIVE_TENANT_ID_KEY)
            else:
                for key in SESSION_KEYS:
                    stored = self._storage.get(key)
                    if stored and tenant_id_to_keep not in stored:
                        self._storage.remove(key)
                        removed.append(key)
        except OSError as e:
            self._probe.session_cleanup_failed(tenant_id_to_keep=tenant_id_to_keep, error=e)

        self._probe.session_data_cleaned(
            tenant_id_to_keep=tenant_id_to_keep,
            removed_keys=removed,
        )
        return removed

    def state_summary(self) -> dict[str, Any]:
        """Summarize the persisted isolation state for diagnostics."""
        summary: dict[str, Any] = {
            "active_tenant_id": None,
            "active_role": None,
            "storage_readable": True,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        try:
            summary["active_tenant_id"] = self._storage.get(ACTIVE_TENANT_ID_KEY)
            summary["active_role"] = self._storage.get(ACTIVE_ROLE_KEY)
        except OSError:
            summary["storage_readable"] = False
        return summary
