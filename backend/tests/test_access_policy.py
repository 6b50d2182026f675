"""
Tests for the role hierarchy and action permissions.
"""

import httpx
import pytest

from conftest import make_context
from services.access_policy import (
    ActionPermissions, assignable_roles, can_manage, can_manage_user, role_rank
)


class TestCanManageUser:
    """Who may edit or delete whom."""

    @pytest.mark.parametrize("actor_role,target_role,expected", [
        ("superadmin", "superadmin", True),
        ("superadmin", "admin", True),
        ("admin", "admin", True),
        ("admin", "superadmin", False),
        ("admin", "cashier", True),
        ("manager", "manager", True),
        ("manager", "user", True),
        ("manager", "kitchenstaff", True),
        ("manager", "admin", False),
        ("manager", "superadmin", False),
        ("user", "user", False),
        ("cashier", "user", False),
    ])
    def test_hierarchy(self, actor_role, target_role, expected):
        assert can_manage_user("actor", actor_role, "target", target_role) is expected

    def test_nobody_manages_themselves(self):
        assert can_manage_user("u-1", "superadmin", "u-1", "user") is False

    def test_roles_are_case_insensitive(self):
        assert can_manage_user("a", "Manager", "b", "ADMIN") is False
        assert can_manage_user("a", "Admin", "b", "Manager") is True

    def test_can_manage_reads_target_record(self):
        ctx = make_context(role="manager", user_id="u-manager")
        assert can_manage(ctx, {"_id": "u-other", "role": "manager"}) is True
        assert can_manage(ctx, {"_id": "u-manager", "role": "user"}) is False
        assert can_manage(ctx, {"id": "u-boss", "role": "admin"}) is False

    def test_custom_roles_rank_as_user(self):
        assert role_rank("kitchenstaff") == role_rank("user")
        assert role_rank("superadmin") > role_rank("admin") > role_rank("manager") > role_rank("user")


class TestAssignableRoles:
    """Roles an actor may grant."""

    def test_system_roles(self):
        assert assignable_roles("superadmin") == ["superadmin", "admin", "manager", "user"]
        assert assignable_roles("admin") == ["admin", "manager", "user"]
        assert assignable_roles("manager") == ["manager", "user"]
        assert assignable_roles("user") == []

    def test_branch_roles(self):
        available = ["admin", "manager", "user", "cashier"]
        assert assignable_roles("admin", available) == available
        assert assignable_roles("manager", available) == ["manager", "user", "cashier"]
        assert assignable_roles("cashier", available) == []


class TestActionPermissions:
    """Per-feature flags loaded from the remote API."""

    PERMISSIONS = {"data": {"permissions": {
        "orders": {"create": True, "delete": False},
        "reports": {"view": True},
    }}}

    def test_loaded_permissions(self, api_client, remote):
        remote.add("GET", "/role-permissions", self.PERMISSIONS)
        permissions = ActionPermissions.load(api_client, make_context(role="manager"))
        assert permissions.can_perform("orders", "create") is True
        assert permissions.can_perform("orders", "delete") is False
        assert permissions.can_perform("users", "create") is False

        sent = remote.sent("GET", "/role-permissions")[0]
        assert sent.url.params["role"] == "manager"
        assert sent.url.params["branch"] == "dhanmondi"

    def test_admin_bypasses(self, api_client, remote):
        remote.add("GET", "/role-permissions", {"data": {"permissions": {}}})
        permissions = ActionPermissions.load(api_client, make_context(role="admin"))
        assert permissions.can_perform("anything", "delete") is True
        assert permissions.to_dict()["bypass"] is True

    def test_missing_record_means_no_permissions(self, api_client, remote):
        remote.add("GET", "/role-permissions", {"message": "Not found"}, status_code=404)
        permissions = ActionPermissions.load(api_client, make_context(role="manager"))
        assert permissions.permissions == {}
        assert permissions.can_perform("orders", "create") is False

    def test_unreachable_remote_means_no_permissions(self, api_client, remote):
        remote.add("GET", "/role-permissions", httpx.ReadTimeout("timed out"))
        permissions = ActionPermissions.load(api_client, make_context(role="user"))
        assert permissions.permissions == {}


class TestPermissionEndpoints:
    """Permissions over HTTP."""

    def test_my_permissions(self, client, manager_headers, remote):
        remote.add("GET", "/role-permissions", TestActionPermissions.PERMISSIONS)
        response = client.get("/api/v1/permissions/me", headers=manager_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "manager"
        assert body["bypass"] is False
        assert body["permissions"]["orders"]["create"] is True

    def test_check(self, client, manager_headers, remote):
        remote.add("GET", "/role-permissions", TestActionPermissions.PERMISSIONS)
        response = client.get(
            "/api/v1/permissions/check",
            headers=manager_headers,
            params={"feature": "orders", "action": "delete"},
        )
        assert response.json() == {"feature": "orders", "action": "delete", "allowed": False}
