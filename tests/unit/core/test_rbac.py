"""Tests for the RBAC permission system."""

import asyncio
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from onboarding.core.rbac.permissions import Permission, Resource, Action
from onboarding.core.rbac.checker import PermissionChecker, has_permission, require_permission
from onboarding.core.rbac.roles import (
    UserRole,
    ROLE_PERMISSIONS,
    STAFF_ROLES,
    get_role_permissions,
)


class TestPermissionModel:
    """Test permission definitions."""

    def test_permission_string_format(self):
        perm = Permission(Resource.APPLICATIONS, Action.SUBMIT)
        assert str(perm) == "applications:submit"

    def test_permission_from_string(self):
        perm = Permission.from_string("contracts:activate")
        assert perm.resource == Resource.CONTRACTS
        assert perm.action == Action.ACTIVATE

    def test_invalid_permission_format(self):
        with pytest.raises(ValueError):
            Permission.from_string("invalid")
        with pytest.raises(ValueError):
            Permission.from_string("too:many:parts")
        with pytest.raises(ValueError):
            Permission.from_string("applications:fly")


class TestRoles:
    """Test the fixed role set."""

    def test_every_role_has_permissions(self):
        assert set(ROLE_PERMISSIONS) == set(UserRole)

    def test_staff_roles(self):
        assert UserRole.SUPPLIER not in STAFF_ROLES
        assert len(STAFF_ROLES) == 4

    def test_unknown_role(self):
        assert get_role_permissions("auditor") == []

    def test_only_procurement_assigns_vendor_numbers(self):
        assert PermissionChecker.for_role("procurement").has_permission("approvals:assign")
        assert not PermissionChecker.for_role("legal").has_permission("approvals:assign")

    def test_only_legal_activates_contracts(self):
        assert PermissionChecker.for_role("legal").has_permission("contracts:activate")
        assert not PermissionChecker.for_role("procurement").has_permission("contracts:activate")

    def test_only_reviewers_review_documents(self):
        assert PermissionChecker.for_role("procurement").has_permission("documents:review")
        assert PermissionChecker.for_role("legal").has_permission("documents:review")
        assert not PermissionChecker.for_role("management").has_permission("documents:review")
        assert not PermissionChecker.for_role("supplier").has_permission("documents:review")

    def test_management_is_read_only(self):
        checker = PermissionChecker.for_role("management")
        assert checker.has_permission("applications:read")
        assert not checker.has_permission("approvals:approve")
        assert not checker.has_permission("applications:create")

    def test_supplier(self):
        checker = PermissionChecker.for_role("supplier")
        assert checker.has_permission("applications:submit")
        assert checker.has_permission("documents:create")
        assert not checker.has_permission("approvals:list")
        assert not checker.has_permission("users:manage")

    def test_super_admin_wildcard(self):
        checker = PermissionChecker.for_role("super_admin")
        assert checker.has_permission("users:manage")
        assert checker.has_permission(Permission(Resource.CONTRACTS, Action.DELETE))


class TestPermissionChecker:

    def test_resource_wildcard(self):
        checker = PermissionChecker(["contracts:*"])
        assert checker.has_permission("contracts:activate")
        assert not checker.has_permission("applications:read")

    def test_any_permission(self):
        checker = PermissionChecker(["applications:read", "applications:list"])
        assert checker.has_any_permission(["applications:read", "users:manage"])
        assert not checker.has_any_permission(["users:manage", "contracts:activate"])

    def test_has_permission_for_user(self):
        assert has_permission(SimpleNamespace(role="legal"), "approvals:approve")
        assert not has_permission(SimpleNamespace(role=None), "approvals:approve")
        assert not has_permission(None, "approvals:approve")


class TestRequirePermission:
    """Test the endpoint decorator."""

    @staticmethod
    @require_permission("approvals:approve")
    async def endpoint(current_user=None):
        return "ok"

    def test_allowed(self):
        user = SimpleNamespace(role="procurement")
        assert asyncio.run(self.endpoint(current_user=user)) == "ok"

    def test_forbidden(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(self.endpoint(current_user=SimpleNamespace(role="supplier")))
        assert exc_info.value.status_code == 403

    def test_unauthenticated(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(self.endpoint())
        assert exc_info.value.status_code == 401
