"""RBAC (Role-Based Access Control) module for the onboarding portal.

Defines the permission model, the fixed role set, and access control utilities.
"""

from .permissions import Permission, Resource, Action
from .roles import UserRole, STAFF_ROLES, ROLE_PERMISSIONS, get_role_permissions
from .checker import PermissionChecker, has_permission, require_permission

__all__ = [
    "Permission",
    "Resource",
    "Action",
    "UserRole",
    "STAFF_ROLES",
    "ROLE_PERMISSIONS",
    "get_role_permissions",
    "PermissionChecker",
    "has_permission",
    "require_permission",
]
