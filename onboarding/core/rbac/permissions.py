"""Permissions are ``resource:action`` pairs, e.g. ``approvals:approve``.

Routes declare the permission they need; roles grant lists of them.
"""

from enum import Enum
from typing import NamedTuple


class Resource(str, Enum):
    APPLICATIONS = "applications"
    DOCUMENTS = "documents"          # metadata only, files live elsewhere
    APPROVALS = "approvals"          # reviewer decisions on applications and profile updates
    CONTRACTS = "contracts"
    USERS = "users"
    NOTIFICATIONS = "notifications"


class Action(str, Enum):
    # record access
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"

    # workflow
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"      # also covers requesting more information
    ASSIGN = "assign"      # vendor numbers
    ACTIVATE = "activate"
    REVIEW = "review"      # document checks

    MANAGE = "manage"


class Permission(NamedTuple):
    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"

    @classmethod
    def from_string(cls, value: str) -> "Permission":
        """Parse ``resource:action``; unknown names raise ValueError."""
        resource, sep, action = value.partition(":")
        if not sep or ":" in action:
            raise ValueError(f"Permission must look like 'resource:action', got {value!r}")
        return cls(Resource(resource), Action(action))
