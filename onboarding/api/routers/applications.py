"""Supplier application endpoints."""

import logging
import uuid
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from onboarding.api.deps import get_db, get_current_user, get_actor
from onboarding.api.schemas.applications import (
    ApplicationCreate,
    ApplicationUpdate,
    ApplicationResponse,
    ApplicationSummary,
    ApprovalHistoryResponse,
    ProfileUpdateCreate,
    ProfileUpdateResponse,
)
from onboarding.api.schemas.common import PaginatedResponse
from onboarding.core.rbac import require_permission
from onboarding.core.rbac.roles import UserRole
from onboarding.core.workflow import (
    Actor,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    WorkflowService,
)
from onboarding.core.workflow.states import EDITABLE_STATES, ApplicationStatus
from onboarding.db.models import SupplierApplication, User
from onboarding.services.notifications import NotificationService

router = APIRouter(prefix="/applications", tags=["applications"])
logger = logging.getLogger(__name__)


def load_visible_application(db: Session, application_id: UUID, user: User) -> SupplierApplication:
    """Load an application the user may see; suppliers only see their own."""
    application = WorkflowService(db).get_application(application_id)
    if user.role == UserRole.SUPPLIER.value and application.submitted_by != user.id:
        raise NotFoundError(f"Application {application_id} not found")
    return application


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
@require_permission("applications:create")
async def create_application(
    application_in: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a draft application owned by the caller."""
    application = SupplierApplication(
        id=uuid.uuid4(),
        submitted_by=current_user.id,
        status=ApplicationStatus.DRAFT.value,
        **application_in.model_dump(),
    )
    db.add(application)
    db.commit()

    logger.info("Application %s created by %s", application.id, current_user.email)
    return ApplicationResponse.model_validate(application)


@router.get("", response_model=PaginatedResponse[ApplicationSummary])
@require_permission("applications:list")
async def list_applications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    stage: Optional[str] = None,
    search: Optional[str] = None,
):
    """List applications. Suppliers only see their own."""
    query = db.query(SupplierApplication)

    if current_user.role == UserRole.SUPPLIER.value:
        query = query.filter(SupplierApplication.submitted_by == current_user.id)
    if status_filter:
        query = query.filter(SupplierApplication.status == status_filter)
    if stage:
        query = query.filter(SupplierApplication.current_approval_stage == stage)
    if search:
        query = query.filter(SupplierApplication.supplier_name.ilike(f"%{search}%"))

    total = query.count()
    applications = (
        query.order_by(SupplierApplication.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )

    return PaginatedResponse[ApplicationSummary].create(
        items=[ApplicationSummary.model_validate(a) for a in applications],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
@require_permission("applications:read")
async def get_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    application = load_visible_application(db, application_id, current_user)
    return ApplicationResponse.model_validate(application)


@router.put("/{application_id}", response_model=ApplicationResponse)
@require_permission("applications:update")
async def update_application(
    application_id: UUID,
    application_in: ApplicationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Edit an application while it is a draft or sent back for more information."""
    application = WorkflowService(db).get_application(application_id, for_update=True)

    if application.submitted_by != current_user.id:
        raise UnauthorizedError("Only the owning supplier may edit the application", action="update")
    if ApplicationStatus(application.status) not in EDITABLE_STATES:
        raise InvalidTransitionError(
            f"Cannot edit an application in status {application.status}",
            action="update",
        )

    for field, value in application_in.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(application, field, value)

    db.commit()
    return ApplicationResponse.model_validate(application)


@router.post("/{application_id}/submit", response_model=ApplicationResponse)
@require_permission("applications:submit")
async def submit_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    """Submit (or resubmit) an application for review."""
    service = WorkflowService(db)
    application = service.submit(application_id, actor)

    db.commit()
    response = ApplicationResponse.model_validate(application)
    await NotificationService(db).dispatch(service.events)
    return response


@router.get("/{application_id}/history", response_model=List[ApprovalHistoryResponse])
@require_permission("applications:read")
async def get_application_history(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Approval history, oldest first."""
    application = load_visible_application(db, application_id, current_user)
    return [ApprovalHistoryResponse.model_validate(h) for h in application.approval_history]


@router.post(
    "/{application_id}/profile-updates",
    response_model=ProfileUpdateResponse,
    status_code=status.HTTP_201_CREATED,
)
@require_permission("applications:update")
async def propose_profile_update(
    application_id: UUID,
    update_in: ProfileUpdateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    """Request a change to one profile field; procurement reviews it."""
    service = WorkflowService(db)
    request = service.propose_profile_update(application_id, actor, update_in.field, update_in.new_value)

    db.commit()
    response = ProfileUpdateResponse.model_validate(request)
    await NotificationService(db).dispatch(service.events)
    return response


@router.get("/{application_id}/profile-updates", response_model=List[ProfileUpdateResponse])
@require_permission("applications:read")
async def list_profile_updates(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[str] = Query(None, alias="status"),
):
    application = load_visible_application(db, application_id, current_user)
    requests = application.profile_update_requests
    if status_filter:
        requests = [r for r in requests if r.status == status_filter]
    return [ProfileUpdateResponse.model_validate(r) for r in requests]
