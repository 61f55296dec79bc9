"""Endpoint guards for the onboarding API.

Each role carries a fixed permission list (see ``roles``). ``require_permission``
is the coarse gate in front of an endpoint; workflow transitions are then
narrowed per stage by ``onboarding.core.workflow.policy``.
"""

from functools import wraps
from typing import Callable, Iterable, Union

from fastapi import HTTPException, status

from .permissions import Permission
from .roles import get_role_permissions

PermissionLike = Union[str, Permission]

WILDCARD = "*:*"


class PermissionChecker:
    """Answers permission queries against one granted set."""

    def __init__(self, granted: Iterable[str]):
        self.granted = frozenset(granted)

    @classmethod
    def for_role(cls, role) -> "PermissionChecker":
        return cls(get_role_permissions(role))

    def has_permission(self, permission: PermissionLike) -> bool:
        wanted = str(permission)
        if wanted in self.granted or WILDCARD in self.granted:
            return True
        resource, _, _ = wanted.partition(":")
        return f"{resource}:*" in self.granted

    def has_any_permission(self, permissions: Iterable[PermissionLike]) -> bool:
        return any(self.has_permission(p) for p in permissions)


def has_permission(user, permission: PermissionLike) -> bool:
    """True if the user's role grants the permission."""
    if user is None or not user.role:
        return False
    return PermissionChecker.for_role(user.role).has_permission(permission)


def require_permission(*permissions: PermissionLike):
    """
    Guard an async FastAPI endpoint; any one of ``permissions`` suffices.

    The endpoint must receive the caller as the ``current_user`` keyword
    dependency.

    Usage:
        @router.post("/{application_id}/submit")
        @require_permission("applications:submit")
        async def submit(application_id: UUID, current_user: User = Depends(get_current_user)):
            ...
    """
    required = [str(p) for p in permissions]

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            user = kwargs.get("current_user")
            if user is None:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Authentication required"
                )

            if not PermissionChecker.for_role(user.role).has_any_permission(required):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"Role {user.role} lacks permission {' or '.join(required)}"
                )

            return await func(*args, **kwargs)

        return wrapper
    return decorator
