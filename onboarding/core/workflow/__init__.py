"""Supplier application approval workflow.

Implements the two-stage (procurement, then legal) review state machine,
its authorization policy and the persistence-aware service.
"""

from .states import (
    ApplicationStatus,
    ApprovalStage,
    WorkflowAction,
    HistoryAction,
    ProfileUpdateStatus,
    REVIEW_STATES,
    TERMINAL_STATES,
)
from .errors import (
    WorkflowError,
    NotFoundError,
    InvalidTransitionError,
    UnauthorizedError,
    ConflictError,
    ValidationError,
)
from .events import WorkflowEvent, NotificationType, NotificationPriority
from .policy import Actor, authorize, is_allowed
from .machine import ApplicationStateMachine, TransitionResult
from .service import WorkflowService

__all__ = [
    "ApplicationStatus",
    "ApprovalStage",
    "WorkflowAction",
    "HistoryAction",
    "ProfileUpdateStatus",
    "REVIEW_STATES",
    "TERMINAL_STATES",
    "WorkflowError",
    "NotFoundError",
    "InvalidTransitionError",
    "UnauthorizedError",
    "ConflictError",
    "ValidationError",
    "WorkflowEvent",
    "NotificationType",
    "NotificationPriority",
    "Actor",
    "authorize",
    "is_allowed",
    "ApplicationStateMachine",
    "TransitionResult",
    "WorkflowService",
]
