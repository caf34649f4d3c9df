"""Domain exceptions for the tenancy bounded context.

These exceptions signal that a domain invariant would be violated. They
are raised by the domain model itself and indicate programming errors in
callers rather than conditions a user can recover from.
"""


class ActiveTenantNotInMembershipsError(Exception):
    """Raised when a session's active tenant does not match any membership.

    The active tenant of a session must always correspond to one of the
    memberships resolved for the identity. This is checked at construction
    and at every mutation of the session.
    """

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Tenant {tenant_id!r} is not among the session memberships")


class InvalidResolutionStateError(Exception):
    """Raised when a resolution state would expose contradictory values.

    For example a state carrying both a session and an onboarding error,
    or an active tenant outside the ``active`` phase.
    """

    pass
