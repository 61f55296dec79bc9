"""Approval workflow API endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from onboarding.api.deps import get_db, get_current_user, get_actor
from onboarding.api.schemas.applications import (
    ApplicationResponse,
    ApplicationSummary,
    ApprovalAction,
    ProfileUpdateResolve,
    ProfileUpdateResponse,
    VendorNumberAssign,
)
from onboarding.core.rbac import require_permission
from onboarding.core.workflow import Actor, WorkflowService
from onboarding.db.models import User
from onboarding.services.notifications import NotificationService

router = APIRouter(prefix="/approvals", tags=["approvals"])


async def _finish(db: Session, service: WorkflowService, application) -> ApplicationResponse:
    """Commit the transition, then notify."""
    db.commit()
    response = ApplicationResponse.model_validate(application)
    await NotificationService(db).dispatch(service.events)
    return response


@router.get("/pending", response_model=List[ApplicationSummary])
@require_permission("approvals:list")
async def list_pending_approvals(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    """Applications waiting in the caller's review queue, oldest submission first."""
    applications = WorkflowService(db).list_queue(actor, limit=per_page, offset=(page - 1) * per_page)
    return [ApplicationSummary.model_validate(a) for a in applications]


@router.post("/{application_id}/approve", response_model=ApplicationResponse)
@require_permission("approvals:approve")
async def approve_application(
    application_id: UUID,
    action: ApprovalAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    """Approve at the current stage."""
    service = WorkflowService(db)
    application = service.approve(application_id, actor, action.comments)
    return await _finish(db, service, application)


@router.post("/{application_id}/reject", response_model=ApplicationResponse)
@require_permission("approvals:reject")
async def reject_application(
    application_id: UUID,
    action: ApprovalAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    """Reject the application. Comments are required."""
    service = WorkflowService(db)
    application = service.reject(application_id, actor, action.comments)
    return await _finish(db, service, application)


@router.post("/{application_id}/request-info", response_model=ApplicationResponse)
@require_permission("approvals:reject")
async def request_more_info(
    application_id: UUID,
    action: ApprovalAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    """Send the application back to the supplier. Comments are required."""
    service = WorkflowService(db)
    application = service.request_info(application_id, actor, action.comments)
    return await _finish(db, service, application)


@router.post("/{application_id}/assign-vendor-number", response_model=ApplicationResponse)
@require_permission("approvals:assign")
async def assign_vendor_number(
    application_id: UUID,
    assignment: VendorNumberAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    service = WorkflowService(db)
    application = service.assign_vendor_number(application_id, actor, assignment.vendor_number)
    return await _finish(db, service, application)


@router.post(
    "/{application_id}/profile-updates/{request_id}/resolve",
    response_model=ProfileUpdateResponse,
)
@require_permission("approvals:approve")
async def resolve_profile_update(
    application_id: UUID,
    request_id: UUID,
    resolution: ProfileUpdateResolve,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    """Approve (apply) or reject a supplier's profile update request."""
    service = WorkflowService(db)
    request = service.resolve_profile_update(application_id, request_id, actor, resolution.decision)

    db.commit()
    response = ProfileUpdateResponse.model_validate(request)
    await NotificationService(db).dispatch(service.events)
    return response
