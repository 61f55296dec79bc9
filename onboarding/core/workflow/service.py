"""Workflow service for supplier applications.

Loads an application under a row lock, runs the state machine against it and
persists the outcome (history entries, profile update requests). The caller
owns the transaction: the service flushes, the API layer commits or rolls
back and only then dispatches the queued notification events.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, List, Optional
from uuid import UUID

from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from onboarding.core.rbac.roles import UserRole
from onboarding.db.models import ApprovalHistoryEntry, ProfileUpdateRequest, SupplierApplication
from onboarding.services.documents import DocumentRepository

from .errors import ConflictError, NotFoundError, ValidationError
from .events import WorkflowEvent
from .machine import ApplicationStateMachine, TransitionResult
from .policy import Actor, STAGE_REVIEWERS
from .states import REVIEW_STATES, ApprovalStage, ProfileUpdateStatus

logger = logging.getLogger(__name__)


class WorkflowService:
    """
    High-level service for the supplier approval workflow.

    Handles:
    - Loading applications with a row lock
    - Performing transitions with persistence
    - Collecting notification events for post-commit dispatch
    - Reviewer queue queries
    """

    def __init__(
        self,
        db: Session,
        *,
        documents: Optional[DocumentRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the workflow service.

        Args:
            db: Database session
            documents: Document store used for the submit precondition
            clock: Time source, ``datetime.utcnow`` by default
        """
        self.db = db
        self.documents = documents or DocumentRepository(db)
        self.clock = clock or datetime.utcnow
        self.events: List[WorkflowEvent] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_application(self, application_id: UUID, *, for_update: bool = False) -> SupplierApplication:
        """Load an application or raise NotFoundError."""
        query = self.db.query(SupplierApplication).filter(SupplierApplication.id == application_id)
        if for_update:
            query = query.with_for_update().populate_existing()

        application = query.first()
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    def list_queue(self, actor: Actor, *, limit: int = 50, offset: int = 0) -> List[SupplierApplication]:
        """
        Applications awaiting a decision from the actor.

        Stage reviewers see their own stage; procurement additionally sees
        approved applications that still need a vendor number. Super admins
        and management see every application under review.
        """
        role = UserRole(actor.role)
        query = self.db.query(SupplierApplication)

        stages = [stage for stage, reviewer in STAGE_REVIEWERS.items() if reviewer == role]
        if stages:
            condition = (
                SupplierApplication.status.in_([s.value for s in REVIEW_STATES])
                & SupplierApplication.current_approval_stage.in_([s.value for s in stages])
            )
            if role == UserRole.PROCUREMENT:
                condition = condition | (
                    (SupplierApplication.status == "approved")
                    & SupplierApplication.vendor_number.is_(None)
                )
            query = query.filter(condition)
        elif role in (UserRole.SUPER_ADMIN, UserRole.MANAGEMENT):
            query = query.filter(SupplierApplication.status.in_([s.value for s in REVIEW_STATES]))
        else:
            return []

        return (
            query.order_by(SupplierApplication.sla_submission_date.asc(), SupplierApplication.created_at.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def submit(self, application_id: UUID, actor: Actor) -> SupplierApplication:
        application = self.get_application(application_id, for_update=True)
        result = self._machine(application).submit(
            actor, document_count=self.documents.count_for_application(application.id)
        )
        return self._record(application, actor, result)

    def approve(self, application_id: UUID, actor: Actor, comments: Optional[str] = None) -> SupplierApplication:
        application = self.get_application(application_id, for_update=True)
        result = self._machine(application).approve(actor, comments)
        return self._record(application, actor, result)

    def reject(self, application_id: UUID, actor: Actor, comments: Optional[str]) -> SupplierApplication:
        application = self.get_application(application_id, for_update=True)
        result = self._machine(application).reject(actor, comments)
        return self._record(application, actor, result)

    def request_info(self, application_id: UUID, actor: Actor, comments: Optional[str]) -> SupplierApplication:
        application = self.get_application(application_id, for_update=True)
        result = self._machine(application).request_info(actor, comments)
        return self._record(application, actor, result)

    def assign_vendor_number(
        self,
        application_id: UUID,
        actor: Actor,
        vendor_number: Optional[str],
    ) -> SupplierApplication:
        """
        Assign a vendor number to an approved application.

        Raises:
            ConflictError: If another application already holds the number
        """
        application = self.get_application(application_id, for_update=True)

        def is_taken(number: str) -> bool:
            holder = (
                self.db.query(SupplierApplication.id)
                .filter(
                    SupplierApplication.vendor_number == number,
                    SupplierApplication.id != application.id,
                )
                .first()
            )
            return holder is not None

        result = self._machine(application).assign_vendor_number(actor, vendor_number, is_taken=is_taken)
        return self._record(application, actor, result)

    def propose_profile_update(
        self,
        application_id: UUID,
        actor: Actor,
        field: str,
        new_value: Any,
    ) -> ProfileUpdateRequest:
        """Record a pending profile update request from the owning supplier."""
        application = self.get_application(application_id, for_update=True)
        proposal, event = self._machine(application).propose_profile_update(actor, field, new_value)

        request = ProfileUpdateRequest(
            id=uuid.uuid4(),
            sequence=len(application.profile_update_requests) + 1,
            field=proposal.field,
            old_value=proposal.old_value,
            new_value=proposal.new_value,
            status=ProfileUpdateStatus.PENDING.value,
            requested_by=proposal.requested_by,
            requested_at=proposal.requested_at,
        )
        application.profile_update_requests.append(request)
        self.events.append(event)
        self._flush()

        logger.info(
            "Profile update requested on application %s: %s by %s",
            application.id, field, actor.id,
        )
        return request

    def resolve_profile_update(
        self,
        application_id: UUID,
        request_id: UUID,
        actor: Actor,
        decision: str,
    ) -> ProfileUpdateRequest:
        """Approve or reject a pending profile update request."""
        application = self.get_application(application_id, for_update=True)

        request = next((r for r in application.profile_update_requests if r.id == request_id), None)
        if request is None:
            raise NotFoundError(f"Profile update request {request_id} not found")

        result = self._machine(application).resolve_profile_update(actor, request, decision)
        self._record(application, actor, result)
        return request

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _machine(self, application: SupplierApplication) -> ApplicationStateMachine:
        return ApplicationStateMachine(application, clock=self.clock)

    def _record(
        self,
        application: SupplierApplication,
        actor: Actor,
        result: TransitionResult,
    ) -> SupplierApplication:
        """Persist history and queue the event produced by a transition."""
        if not result.changed:
            return application

        if result.history is not None:
            history = result.history
            application.approval_history.append(
                ApprovalHistoryEntry(
                    id=uuid.uuid4(),
                    sequence=len(application.approval_history) + 1,
                    approver_id=history.approver_id,
                    action=history.action.value,
                    stage=history.stage.value,
                    comments=history.comments,
                    created_at=history.timestamp,
                )
            )

        if result.event is not None:
            self.events.append(result.event)

        self._flush()

        logger.info(
            "Application %s: %s by %s (%s -> %s, stage %s)",
            application.id,
            result.action.value,
            actor.id,
            result.from_status.value,
            result.to_status.value,
            application.current_approval_stage,
        )
        return application

    def _flush(self) -> None:
        try:
            self.db.flush()
        except StaleDataError:
            raise ConflictError("Application was modified by another request; reload and retry")
        except IntegrityError as e:
            raise ConflictError(f"Conflicting update: {e.orig}")
        except DataError as e:
            raise ValidationError(f"Value rejected by the database: {e.orig}")
