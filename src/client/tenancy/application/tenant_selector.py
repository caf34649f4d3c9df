"""Active tenant selection.

Validates a user's choice of active tenant against the memberships of
the resolved session and persists the choice as an advisory hint.
Rejected selections are security events: they are logged through the
probe and leave the session untouched, never raising to the UI.
"""

from __future__ import annotations

from tenancy.application.isolation_validator import IsolationValidator
from tenancy.application.observability import (
    DefaultTenantSelectorProbe,
    TenantSelectorProbe,
)
from tenancy.domain.models import Session
from tenancy.domain.permissions import can_write
from tenancy.domain.value_objects import Role, WritableSection, is_valid_tenant_id
from tenancy.ports.storage import ACTIVE_ROLE_KEY, ACTIVE_TENANT_ID_KEY, IKeyValueStore


class ActiveTenantSelector:
    """Switches the active tenant of a session."""

    def __init__(
        self,
        storage: IKeyValueStore,
        isolation_validator: IsolationValidator,
        probe: TenantSelectorProbe | None = None,
    ):
        self._storage = storage
        self._isolation_validator = isolation_validator
        self._probe = probe or DefaultTenantSelectorProbe()

    def select(self, session: Session | None, tenant_id: str | None) -> Session | None:
        """Select (or with None, deselect) the active tenant of a session.

        Args:
            session: The current session, or None if none is resolved
            tenant_id: Tenant to activate, or None to clear the selection

        Returns:
            The updated session, or None when the selection was rejected
        """
        if session is None:
            self._probe.selection_without_session(tenant_id=tenant_id)
            return None

        user_id = session.identity.id

        if tenant_id is None:
            updated = session.without_active_tenant()
            self.persist(updated)
            self._isolation_validator.cleanup_session_data(None)
            self._probe.tenant_deselected(user_id=user_id)
            return updated

        if not is_valid_tenant_id(tenant_id):
            self._probe.malformed_tenant_id(user_id=user_id, raw_value=str(tenant_id))
            return None

        if not session.has_membership(tenant_id):
            self._probe.unauthorized_tenant_switch(user_id=user_id, tenant_id=tenant_id)
            return None

        updated = session.with_active_tenant(tenant_id)
        self.persist(updated)
        self._probe.tenant_selected(
            user_id=user_id,
            tenant_id=tenant_id,
            role=updated.active_role,
        )
        return updated

    def persist(self, session: Session) -> None:
        """Write the session's active tenant and role as persisted hints.

        Both keys are removed when no tenant is active. Hints are advisory,
        so a storage failure is logged and the session is kept as is.
        """
        try:
            if session.active_tenant_id is None or session.active_role is None:
                self._storage.remove(ACTIVE_TENANT_ID_KEY)
                self._storage.remove(ACTIVE_ROLE_KEY)
            else:
                self._storage.set(ACTIVE_TENANT_ID_KEY, session.active_tenant_id)
                self._storage.set(ACTIVE_ROLE_KEY, session.active_role.value)
        except OSError as e:
            self._probe.selection_persist_failed(user_id=session.identity.id, error=e)

    @staticmethod
    def can_write(role: Role | None, section: WritableSection | str) -> bool:
        """Check if a role may write to a section; see ``permissions.can_write``."""
        return can_write(role, section)
