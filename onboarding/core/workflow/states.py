"""Supplier application workflow states and transitions.

State Machine Diagram:

    ┌───────┐  submit   ┌───────────┐
    │ DRAFT │──────────►│ SUBMITTED │◄──────────────────┐
    └───────┘           └─────┬─────┘                   │ resubmit
                              │ procurement approves    │
                        ┌─────▼─────────┐  request info ┌┴───────────────────┐
                        │ PENDING_LEGAL │──────────────►│ MORE_INFO_REQUIRED │
                        └─────┬─────────┘               └────────────────────┘
                              │ legal approves
                        ┌─────▼────┐
                        │ APPROVED │──► vendor number assigned (status unchanged)
                        └──────────┘

    Any review state ──reject──► REJECTED (terminal)

Orthogonal to the status, the stage records which reviewer queue owns the
application: PROCUREMENT → LEGAL → COMPLETED.
"""

from enum import Enum
from typing import Dict, FrozenSet, NamedTuple, Optional


class ApplicationStatus(str, Enum):
    """Lifecycle status of a supplier application."""
    
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    PENDING_PROCUREMENT = "pending_procurement"
    PENDING_LEGAL = "pending_legal"
    MORE_INFO_REQUIRED = "more_info_required"
    
    # Terminal states
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalStage(str, Enum):
    """Reviewer queue that currently owns an application."""
    
    PROCUREMENT = "procurement"
    LEGAL = "legal"
    COMPLETED = "completed"


class WorkflowAction(str, Enum):
    """Operations that the workflow engine performs."""
    
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_INFO = "request_info"
    ASSIGN_VENDOR_NUMBER = "assign_vendor_number"
    PROPOSE_PROFILE_UPDATE = "propose_profile_update"
    RESOLVE_PROFILE_UPDATE = "resolve_profile_update"


class HistoryAction(str, Enum):
    """Action tags recorded in the approval history."""
    
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUESTED_INFO = "requested_info"
    ASSIGNED_VENDOR_NUMBER = "assigned_vendor_number"


class ProfileUpdateStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# States from which the owner may (re)submit
SUBMITTABLE_STATES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.DRAFT,
    ApplicationStatus.MORE_INFO_REQUIRED,
})

# States in which the owner may still edit the application and its documents
EDITABLE_STATES: FrozenSet[ApplicationStatus] = SUBMITTABLE_STATES

# States that sit in a reviewer queue
REVIEW_STATES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.SUBMITTED,
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.PENDING_PROCUREMENT,
    ApplicationStatus.PENDING_LEGAL,
})

TERMINAL_STATES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.APPROVED,
    ApplicationStatus.REJECTED,
})

# Stages in which a reviewer decision is still outstanding
REVIEW_STAGES: FrozenSet[ApprovalStage] = frozenset({
    ApprovalStage.PROCUREMENT,
    ApprovalStage.LEGAL,
})


class TransitionRule(NamedTuple):
    """Defines the status precondition and history tag of an action."""
    action: WorkflowAction
    from_states: FrozenSet[ApplicationStatus]
    history_action: Optional[HistoryAction] = None
    requires_comment: bool = False


TRANSITION_RULES: list[TransitionRule] = [
    TransitionRule(WorkflowAction.SUBMIT, SUBMITTABLE_STATES),
    TransitionRule(WorkflowAction.APPROVE, REVIEW_STATES, HistoryAction.APPROVED),
    TransitionRule(WorkflowAction.REJECT, REVIEW_STATES, HistoryAction.REJECTED,
                   requires_comment=True),
    TransitionRule(WorkflowAction.REQUEST_INFO, REVIEW_STATES, HistoryAction.REQUESTED_INFO,
                   requires_comment=True),
    TransitionRule(WorkflowAction.ASSIGN_VENDOR_NUMBER, frozenset({ApplicationStatus.APPROVED}),
                   HistoryAction.ASSIGNED_VENDOR_NUMBER),
    TransitionRule(WorkflowAction.PROPOSE_PROFILE_UPDATE,
                   frozenset(ApplicationStatus) - {ApplicationStatus.DRAFT, ApplicationStatus.REJECTED}),
    TransitionRule(WorkflowAction.RESOLVE_PROFILE_UPDATE, frozenset(ApplicationStatus)),
]

TRANSITION_RULES_BY_ACTION: Dict[WorkflowAction, TransitionRule] = {
    rule.action: rule for rule in TRANSITION_RULES
}


def can_transition(from_state: ApplicationStatus, action: WorkflowAction) -> bool:
    """Check if an action is allowed from the given status."""
    rule = TRANSITION_RULES_BY_ACTION.get(action)
    return rule is not None and from_state in rule.from_states


def get_transition_rule(action: WorkflowAction) -> Optional[TransitionRule]:
    """Get the transition rule for an action."""
    return TRANSITION_RULES_BY_ACTION.get(action)
