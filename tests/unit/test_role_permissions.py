import pytest

from admin_panel.utils.role_permissions import (
    ROLE_PERMISSIONS,
    USER_PERMISSIONS,
    get_role_permissions,
    role_allows_panel,
)


class TestRolePermissions:
    def test_admin_holds_every_permission(self):
        assert get_role_permissions("admin") == USER_PERMISSIONS

    def test_registered_permissions(self):
        assert get_role_permissions("registered") == ["view user", "update user"]

    @pytest.mark.parametrize("role", ["owner", "agent"])
    def test_owner_and_agent_permissions(self, role):
        assert get_role_permissions(role) == ["view any user", "view user", "update user"]

    def test_unknown_role(self):
        with pytest.raises(ValueError, match="Unknown role"):
            get_role_permissions("superuser")

    def test_returned_list_is_a_copy(self):
        perms = get_role_permissions("admin")
        perms.clear()
        assert ROLE_PERMISSIONS["admin"]

    def test_only_admin_enters_panel(self):
        assert role_allows_panel("admin")
        assert not role_allows_panel("owner")
        assert not role_allows_panel("ghost")
