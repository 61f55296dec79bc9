"""Authorization policy for workflow transitions.

A single capability set keyed by ``(role, stage, action)`` decides whether a
reviewer may act on an application. Owner-only actions (submitting and
proposing profile updates) are checked against ``submitted_by`` instead.
"""

from typing import FrozenSet, NamedTuple, Tuple
from uuid import UUID

from onboarding.core.rbac.roles import UserRole

from .errors import UnauthorizedError
from .states import ApprovalStage, WorkflowAction


class Actor(NamedTuple):
    """The acting principal as supplied by the identity store."""
    id: UUID
    role: UserRole


_REVIEW_ACTIONS = (
    WorkflowAction.APPROVE,
    WorkflowAction.REJECT,
    WorkflowAction.REQUEST_INFO,
)

CAPABILITIES: FrozenSet[Tuple[UserRole, ApprovalStage, WorkflowAction]] = frozenset(
    [(UserRole.PROCUREMENT, ApprovalStage.PROCUREMENT, action) for action in _REVIEW_ACTIONS]
    + [(UserRole.LEGAL, ApprovalStage.LEGAL, action) for action in _REVIEW_ACTIONS]
    + [(UserRole.PROCUREMENT, ApprovalStage.COMPLETED, WorkflowAction.ASSIGN_VENDOR_NUMBER)]
    + [(UserRole.PROCUREMENT, stage, WorkflowAction.RESOLVE_PROFILE_UPDATE) for stage in ApprovalStage]
)

OWNER_ACTIONS: FrozenSet[WorkflowAction] = frozenset({
    WorkflowAction.SUBMIT,
    WorkflowAction.PROPOSE_PROFILE_UPDATE,
})


def is_allowed(role: UserRole, stage: ApprovalStage, action: WorkflowAction) -> bool:
    """Check the capability set for a reviewer action."""
    return (role, stage, action) in CAPABILITIES


def authorize(actor: Actor, application, action: WorkflowAction) -> None:
    """
    Raise UnauthorizedError unless the actor may perform the action.
    
    Args:
        actor: Acting principal
        application: Application record (needs ``submitted_by`` and
            ``current_approval_stage``)
        action: Workflow action being attempted
    """
    role = UserRole(actor.role)
    
    if action in OWNER_ACTIONS:
        if role != UserRole.SUPPLIER or actor.id != application.submitted_by:
            raise UnauthorizedError(
                f"Only the owning supplier may {action.value.replace('_', ' ')}",
                action=action.value,
            )
        return
    
    stage = ApprovalStage(application.current_approval_stage)
    if not is_allowed(role, stage, action):
        raise UnauthorizedError(
            f"Role {role.value} cannot {action.value} while stage is {stage.value}",
            action=action.value,
        )


# Reviewer role that owns each stage's queue
STAGE_REVIEWERS = {
    ApprovalStage.PROCUREMENT: UserRole.PROCUREMENT,
    ApprovalStage.LEGAL: UserRole.LEGAL,
}
