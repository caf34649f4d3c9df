"""Unit tests for role-based write permissions."""

import pytest

from tenancy.domain.permissions import can_write
from tenancy.domain.value_objects import Role, WritableSection

ALL_SECTIONS = list(WritableSection)


class TestCanWrite:
    @pytest.mark.parametrize("role", [Role.OWNER, Role.MANAGER])
    @pytest.mark.parametrize("section", ALL_SECTIONS)
    def test_owner_and_manager_write_everywhere(self, role, section):
        assert can_write(role, section)

    @pytest.mark.parametrize(
        "section", [s for s in ALL_SECTIONS if s not in (WritableSection.SETTINGS, WritableSection.USERS)]
    )
    def test_employee_writes_business_sections(self, section):
        assert can_write(Role.EMPLOYEE, section)

    @pytest.mark.parametrize("section", [WritableSection.SETTINGS, WritableSection.USERS])
    def test_employee_cannot_write_settings_or_users(self, section):
        assert not can_write(Role.EMPLOYEE, section)

    @pytest.mark.parametrize("role", [Role.VIEWER, None])
    @pytest.mark.parametrize("section", ALL_SECTIONS)
    def test_viewer_and_no_role_write_nothing(self, role, section):
        assert not can_write(role, section)

    def test_accepts_section_names(self):
        assert not can_write(Role.EMPLOYEE, "settings")
        assert can_write(Role.MANAGER, "settings")

    def test_rejects_unknown_section(self):
        with pytest.raises(ValueError):
            can_write(Role.OWNER, "payroll")
