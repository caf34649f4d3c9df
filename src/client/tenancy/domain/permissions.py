"""Write-permission rules for tenant roles.

Permissions depend only on the role and the section being written to,
never on which tenant is active.
"""

from __future__ import annotations

from tenancy.domain.value_objects import Role, WritableSection

_EMPLOYEE_RESTRICTED_SECTIONS = frozenset({WritableSection.SETTINGS, WritableSection.USERS})


def can_write(role: Role | None, section: WritableSection | str) -> bool:
    """Check if a role may write to a section.

    Owners and managers may write everywhere, employees everywhere except
    settings and user management, viewers (and users without a role)
    nowhere.

    Args:
        role: The active role, or None if no tenant is selected
        section: The section to write to

    Returns:
        True if the write is allowed

    Raises:
        ValueError: If ``section`` is not a known section name
    """
    section = WritableSection(section)
    if role is None:
        return False
    if role.at_least(Role.MANAGER):
        return True
    if role == Role.EMPLOYEE:
        return section not in _EMPLOYEE_RESTRICTED_SECTIONS
    return False
