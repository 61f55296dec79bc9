"""Supplier application state machine.

Validates and applies workflow transitions on a single application record.
All preconditions are checked before any attribute is touched, so a failed
call leaves the record exactly as it was.
"""

from datetime import datetime
from typing import Any, Callable, NamedTuple, Optional
from uuid import UUID

from onboarding.core.rbac.roles import UserRole

from .errors import ConflictError, InvalidTransitionError, ValidationError, WorkflowError
from .events import NotificationPriority, NotificationType, WorkflowEvent
from .policy import Actor, STAGE_REVIEWERS, authorize
from .profile import PROFILE_UPDATABLE_FIELDS, coerce_profile_value, stringify
from . import sla
from .states import (
    ApplicationStatus,
    ApprovalStage,
    HistoryAction,
    ProfileUpdateStatus,
    WorkflowAction,
    TERMINAL_STATES,
    can_transition,
    get_transition_rule,
)


class HistoryRecord(NamedTuple):
    """A single approval history entry, immutable once appended."""
    approver_id: UUID
    action: HistoryAction
    stage: ApprovalStage
    comments: Optional[str]
    timestamp: datetime


class TransitionResult(NamedTuple):
    """Outcome of a transition, handed back to the persistence layer."""
    action: WorkflowAction
    from_status: ApplicationStatus
    to_status: ApplicationStatus
    history: Optional[HistoryRecord] = None
    event: Optional[WorkflowEvent] = None
    changed: bool = True


class ProfileUpdateProposal(NamedTuple):
    field: str
    old_value: Optional[str]
    new_value: str
    requested_by: UUID
    requested_at: datetime


class ApplicationStateMachine:
    """
    State machine for the supplier application approval workflow.

    Operates on any object exposing the application attributes
    (``status``, ``current_approval_stage``, ``submitted_by``,
    ``vendor_number``, SLA columns, ...), normally the ORM model.
    """

    def __init__(
        self,
        application,
        *,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.application = application
        self._clock = clock

    @property
    def status(self) -> ApplicationStatus:
        return ApplicationStatus(self.application.status)

    @property
    def stage(self) -> ApprovalStage:
        return ApprovalStage(self.application.current_approval_stage)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def available_actions(self, actor: Actor) -> list[WorkflowAction]:
        """Actions the actor could perform from the current state."""
        available = []
        for action in WorkflowAction:
            if action == WorkflowAction.ASSIGN_VENDOR_NUMBER and self.application.vendor_number:
                continue
            try:
                # Comment requirements are input checks, not capabilities
                self._check(action, actor, comments="-")
            except WorkflowError:
                continue
            available.append(action)
        return available

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def submit(self, actor: Actor, *, document_count: int) -> TransitionResult:
        """Submit (or resubmit) the application for review."""
        from_status = self.status
        self._check(WorkflowAction.SUBMIT, actor)

        if document_count < 1:
            raise InvalidTransitionError(
                "At least one document must be attached before submitting",
                action=WorkflowAction.SUBMIT.value,
            )

        now = self._clock()
        app = self.application

        if from_status == ApplicationStatus.DRAFT:
            app.current_approval_stage = ApprovalStage.PROCUREMENT.value
        app.status = ApplicationStatus.SUBMITTED.value
        app.submitted_at = now
        app.sla_submission_date = now
        app.sla_expected_completion_date = sla.expected_completion(now)
        app.sla_actual_completion_date = None
        app.sla_days_to_complete = None
        app.sla_is_overdue = False

        queue = self.stage.value
        reviewer = STAGE_REVIEWERS[self.stage]
        event = WorkflowEvent(
            type=NotificationType.APPLICATION_SUBMITTED,
            title="New Supplier Application" if from_status == ApplicationStatus.DRAFT
            else "Supplier Application Resubmitted",
            message=f"Supplier application from {app.supplier_name} requires {queue} review",
            entity_id=app.id,
            recipient_roles=(reviewer.value,),
            action_url=f"/suppliers/{app.id}",
        )
        return TransitionResult(WorkflowAction.SUBMIT, from_status, self.status, None, event)

    def approve(self, actor: Actor, comments: Optional[str] = None) -> TransitionResult:
        """Approve at the current stage, advancing procurement → legal → completed."""
        from_status = self.status
        stage = self.stage
        self._check(WorkflowAction.APPROVE, actor, comments)

        now = self._clock()
        app = self.application
        note = comments.strip() if comments and comments.strip() else None
        history = self._history(actor, HistoryAction.APPROVED, stage, note, now)

        if stage == ApprovalStage.PROCUREMENT:
            app.current_approval_stage = ApprovalStage.LEGAL.value
            app.status = ApplicationStatus.PENDING_LEGAL.value
            event = WorkflowEvent(
                type=NotificationType.APPLICATION_APPROVED,
                title="Application Approved by Procurement",
                message=f"{app.supplier_name} has been approved by procurement and requires legal review",
                entity_id=app.id,
                recipient_roles=(UserRole.LEGAL.value,),
                recipient_ids=self._owner_ids(),
                action_url=f"/suppliers/{app.id}",
            )
        else:
            app.current_approval_stage = ApprovalStage.COMPLETED.value
            app.status = ApplicationStatus.APPROVED.value
            app.approved_at = now
            if app.sla_submission_date is not None:
                days = sla.days_to_complete(app.sla_submission_date, now)
                app.sla_actual_completion_date = now
                app.sla_days_to_complete = days
                app.sla_is_overdue = sla.is_overdue(days)
            event = WorkflowEvent(
                type=NotificationType.APPLICATION_APPROVED,
                title="Application Approved by Legal",
                message=f"{app.supplier_name} has been fully approved and awaits vendor number assignment",
                entity_id=app.id,
                recipient_roles=(UserRole.PROCUREMENT.value,),
                recipient_ids=self._owner_ids(),
                action_url=f"/applications/{app.id}",
            )

        return TransitionResult(WorkflowAction.APPROVE, from_status, self.status, history, event)

    def reject(self, actor: Actor, comments: Optional[str]) -> TransitionResult:
        """Reject the application. Rejection is terminal."""
        from_status = self.status
        stage = self.stage
        self._check(WorkflowAction.REJECT, actor, comments)

        now = self._clock()
        app = self.application
        reason = comments.strip()
        history = self._history(actor, HistoryAction.REJECTED, stage, reason, now)

        app.status = ApplicationStatus.REJECTED.value
        app.current_approval_stage = ApprovalStage.COMPLETED.value
        app.rejected_at = now
        app.rejection_reason = reason

        event = WorkflowEvent(
            type=NotificationType.APPLICATION_REJECTED,
            title="Application Rejected",
            message=f"Your application has been rejected. Reason: {reason}",
            entity_id=app.id,
            recipient_ids=self._owner_ids(),
            priority=NotificationPriority.HIGH,
            action_url=f"/applications/{app.id}",
        )
        return TransitionResult(WorkflowAction.REJECT, from_status, self.status, history, event)

    def request_info(self, actor: Actor, comments: Optional[str]) -> TransitionResult:
        """Send the application back to the supplier; the stage is kept."""
        from_status = self.status
        stage = self.stage
        self._check(WorkflowAction.REQUEST_INFO, actor, comments)

        now = self._clock()
        app = self.application
        history = self._history(actor, HistoryAction.REQUESTED_INFO, stage, comments.strip(), now)

        app.status = ApplicationStatus.MORE_INFO_REQUIRED.value

        event = WorkflowEvent(
            type=NotificationType.MORE_INFO_REQUIRED,
            title="Additional Information Required",
            message=f"Please provide additional information: {comments.strip()}",
            entity_id=app.id,
            recipient_ids=self._owner_ids(),
            priority=NotificationPriority.HIGH,
            action_url=f"/applications/{app.id}",
        )
        return TransitionResult(WorkflowAction.REQUEST_INFO, from_status, self.status, history, event)

    def assign_vendor_number(
        self,
        actor: Actor,
        vendor_number: Optional[str],
        *,
        is_taken: Optional[Callable[[str], bool]] = None,
    ) -> TransitionResult:
        """
        Assign the vendor number of an approved application.

        Re-assigning the number the application already holds is a no-op.
        ``is_taken`` reports whether another application already holds a
        number; it is consulted after every other precondition.
        """
        from_status = self.status
        self._check(WorkflowAction.ASSIGN_VENDOR_NUMBER, actor)

        number = (vendor_number or "").strip()
        if not number:
            raise ValidationError(
                "Vendor number is required",
                action=WorkflowAction.ASSIGN_VENDOR_NUMBER.value,
            )

        app = self.application
        if app.vendor_number:
            if app.vendor_number == number:
                return TransitionResult(
                    WorkflowAction.ASSIGN_VENDOR_NUMBER, from_status, from_status, changed=False
                )
            raise InvalidTransitionError(
                f"Vendor number {app.vendor_number} is already assigned",
                action=WorkflowAction.ASSIGN_VENDOR_NUMBER.value,
            )

        if is_taken is not None and is_taken(number):
            raise ConflictError(
                f"Vendor number {number} is already assigned to another supplier",
                action=WorkflowAction.ASSIGN_VENDOR_NUMBER.value,
            )

        now = self._clock()
        history = self._history(
            actor,
            HistoryAction.ASSIGNED_VENDOR_NUMBER,
            self.stage,
            f"Vendor number {number} assigned",
            now,
        )
        app.vendor_number = number

        event = WorkflowEvent(
            type=NotificationType.VENDOR_NUMBER_ASSIGNED,
            title="Vendor Number Assigned",
            message=f"Your vendor number is: {number}. You are now fully onboarded!",
            entity_id=app.id,
            recipient_ids=self._owner_ids(),
            priority=NotificationPriority.HIGH,
            action_url=f"/applications/{app.id}",
        )
        return TransitionResult(
            WorkflowAction.ASSIGN_VENDOR_NUMBER, from_status, from_status, history, event
        )

    # ------------------------------------------------------------------
    # Profile update sub-workflow
    # ------------------------------------------------------------------

    def propose_profile_update(
        self,
        actor: Actor,
        field: str,
        new_value: Any,
    ) -> tuple[ProfileUpdateProposal, WorkflowEvent]:
        """Validate a single-field change proposed by the owning supplier."""
        self._check(WorkflowAction.PROPOSE_PROFILE_UPDATE, actor)

        if field not in PROFILE_UPDATABLE_FIELDS:
            raise ValidationError(
                f"Field {field!r} cannot be updated through a profile request",
                action=WorkflowAction.PROPOSE_PROFILE_UPDATE.value,
            )
        if new_value is None:
            raise ValidationError("A new value is required")

        value = stringify(new_value)
        coerce_profile_value(field, value)

        app = self.application
        proposal = ProfileUpdateProposal(
            field=field,
            old_value=stringify(getattr(app, field)),
            new_value=value,
            requested_by=actor.id,
            requested_at=self._clock(),
        )
        event = WorkflowEvent(
            type=NotificationType.PROFILE_UPDATE_REQUESTED,
            title="Profile Update Request",
            message=f"{app.supplier_name} has requested an update to {field}",
            entity_id=app.id,
            recipient_roles=(UserRole.PROCUREMENT.value,),
            action_url=f"/suppliers/{app.id}",
        )
        return proposal, event

    def resolve_profile_update(self, actor: Actor, request, decision: str) -> TransitionResult:
        """Approve (apply) or reject a pending profile update request."""
        from_status = self.status
        if request.status != ProfileUpdateStatus.PENDING.value:
            raise InvalidTransitionError(
                f"Profile update request is already {request.status}",
                action=WorkflowAction.RESOLVE_PROFILE_UPDATE.value,
            )
        self._check(WorkflowAction.RESOLVE_PROFILE_UPDATE, actor)

        try:
            outcome = ProfileUpdateStatus(decision)
        except ValueError:
            outcome = None
        if outcome not in (ProfileUpdateStatus.APPROVED, ProfileUpdateStatus.REJECTED):
            raise ValidationError(
                "Decision must be 'approved' or 'rejected'",
                action=WorkflowAction.RESOLVE_PROFILE_UPDATE.value,
            )

        app = self.application
        if outcome == ProfileUpdateStatus.APPROVED:
            value = coerce_profile_value(request.field, request.new_value)
            setattr(app, request.field, value)
            notification_type = NotificationType.PROFILE_UPDATE_APPROVED
        else:
            notification_type = NotificationType.PROFILE_UPDATE_REJECTED

        request.status = outcome.value
        request.processed_by = actor.id
        request.processed_at = self._clock()

        event = WorkflowEvent(
            type=notification_type,
            title=f"Profile Update {outcome.value.capitalize()}",
            message=f"Your request to update {request.field} has been {outcome.value}",
            entity_id=app.id,
            recipient_ids=self._owner_ids(),
            action_url="/profile",
        )
        return TransitionResult(
            WorkflowAction.RESOLVE_PROFILE_UPDATE, from_status, from_status, None, event
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check(self, action: WorkflowAction, actor: Actor, comments: Optional[str] = None) -> None:
        """Status precondition, then capability, then required input."""
        if not can_transition(self.status, action):
            raise InvalidTransitionError(
                f"Cannot {action.value} an application in status {self.status.value}",
                action=action.value,
            )

        authorize(actor, self.application, action)

        rule = get_transition_rule(action)
        if rule.requires_comment and not (comments and comments.strip()):
            raise ValidationError(
                f"Comments are required to {action.value.replace('_', ' ')}",
                action=action.value,
            )

    def _history(
        self,
        actor: Actor,
        action: HistoryAction,
        stage: ApprovalStage,
        comments: Optional[str],
        timestamp: datetime,
    ) -> HistoryRecord:
        return HistoryRecord(actor.id, action, stage, comments, timestamp)

    def _owner_ids(self) -> tuple:
        owner = self.application.submitted_by
        return (owner,) if owner else ()
