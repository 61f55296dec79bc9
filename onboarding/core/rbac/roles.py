"""Role definitions for the onboarding portal.

Roles are fixed and stored as a string on the user record:
1. Super admin - Full system access, user management
2. Procurement - First review stage, vendor numbers, profile updates
3. Legal - Second review stage, contract activation
4. Management - Read-only oversight
5. Supplier - Owns and submits its own applications
"""

from enum import Enum
from typing import Dict, FrozenSet, List

from .permissions import Resource, Action, Permission


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    PROCUREMENT = "procurement"
    LEGAL = "legal"
    MANAGEMENT = "management"
    SUPPLIER = "supplier"


STAFF_ROLES: FrozenSet[UserRole] = frozenset({
    UserRole.SUPER_ADMIN,
    UserRole.PROCUREMENT,
    UserRole.LEGAL,
    UserRole.MANAGEMENT,
})


def _build_permissions(*perms: tuple) -> List[str]:
    """Build permission strings from (Resource, Action) tuples."""
    return [str(Permission(r, a)) for r, a in perms]


SUPER_ADMIN_PERMISSIONS = [
    "*:*"
]

_REVIEWER_BASE = (
    (Resource.APPLICATIONS, Action.READ),
    (Resource.APPLICATIONS, Action.LIST),
    (Resource.DOCUMENTS, Action.READ),
    (Resource.DOCUMENTS, Action.LIST),
    (Resource.DOCUMENTS, Action.REVIEW),
    (Resource.APPROVALS, Action.LIST),
    (Resource.APPROVALS, Action.APPROVE),
    (Resource.APPROVALS, Action.REJECT),
    (Resource.CONTRACTS, Action.CREATE),
    (Resource.CONTRACTS, Action.READ),
    (Resource.CONTRACTS, Action.LIST),
    (Resource.CONTRACTS, Action.UPDATE),
    (Resource.NOTIFICATIONS, Action.READ),
    (Resource.NOTIFICATIONS, Action.LIST),
)

PROCUREMENT_PERMISSIONS = _build_permissions(
    *_REVIEWER_BASE,
    (Resource.APPROVALS, Action.ASSIGN),
)

LEGAL_PERMISSIONS = _build_permissions(
    *_REVIEWER_BASE,
    (Resource.CONTRACTS, Action.ACTIVATE),
)

MANAGEMENT_PERMISSIONS = _build_permissions(
    (Resource.APPLICATIONS, Action.READ),
    (Resource.APPLICATIONS, Action.LIST),
    (Resource.DOCUMENTS, Action.READ),
    (Resource.DOCUMENTS, Action.LIST),
    (Resource.CONTRACTS, Action.READ),
    (Resource.CONTRACTS, Action.LIST),
    (Resource.NOTIFICATIONS, Action.READ),
    (Resource.NOTIFICATIONS, Action.LIST),
)

SUPPLIER_PERMISSIONS = _build_permissions(
    (Resource.APPLICATIONS, Action.CREATE),
    (Resource.APPLICATIONS, Action.READ),
    (Resource.APPLICATIONS, Action.LIST),
    (Resource.APPLICATIONS, Action.UPDATE),
    (Resource.APPLICATIONS, Action.SUBMIT),
    (Resource.DOCUMENTS, Action.CREATE),
    (Resource.DOCUMENTS, Action.READ),
    (Resource.DOCUMENTS, Action.LIST),
    (Resource.DOCUMENTS, Action.DELETE),
    (Resource.CONTRACTS, Action.READ),
    (Resource.CONTRACTS, Action.LIST),
    (Resource.NOTIFICATIONS, Action.READ),
    (Resource.NOTIFICATIONS, Action.LIST),
)


ROLE_PERMISSIONS: Dict[UserRole, List[str]] = {
    UserRole.SUPER_ADMIN: SUPER_ADMIN_PERMISSIONS,
    UserRole.PROCUREMENT: PROCUREMENT_PERMISSIONS,
    UserRole.LEGAL: LEGAL_PERMISSIONS,
    UserRole.MANAGEMENT: MANAGEMENT_PERMISSIONS,
    UserRole.SUPPLIER: SUPPLIER_PERMISSIONS,
}


def get_role_permissions(role: str) -> List[str]:
    """Get the permission strings granted to a role name."""
    try:
        return list(ROLE_PERMISSIONS[UserRole(role)])
    except ValueError:
        return []
