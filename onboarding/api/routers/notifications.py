"""In-app notification endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from onboarding.api.deps import get_db, get_current_user
from onboarding.api.schemas.notifications import NotificationResponse
from onboarding.core.rbac import require_permission
from onboarding.core.workflow import NotFoundError
from onboarding.db.models import Notification, User
from onboarding.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse])
@require_permission("notifications:list")
async def list_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    unread_only: bool = False,
):
    notifications = NotificationService(db).list_for_user(current_user.id, unread_only=unread_only)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.post("/{notification_id}/read", response_model=NotificationResponse)
@require_permission("notifications:read")
async def mark_notification_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == current_user.id,
    ).first()
    if notification is None:
        raise NotFoundError(f"Notification {notification_id} not found")

    NotificationService(db).mark_read(notification)
    db.commit()
    return NotificationResponse.model_validate(notification)
