"""Events emitted by the workflow engine for the notification dispatcher."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID


class NotificationType(str, Enum):
    """Notification type tags."""
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    MORE_INFO_REQUIRED = "more_info_required"
    VENDOR_NUMBER_ASSIGNED = "vendor_number_assigned"
    PROFILE_UPDATE_REQUESTED = "profile_update_requested"
    PROFILE_UPDATE_APPROVED = "profile_update_approved"
    PROFILE_UPDATE_REJECTED = "profile_update_rejected"
    CONTRACT_CREATED = "contract_created"
    CONTRACT_ACTIVATED = "contract_activated"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class WorkflowEvent:
    """
    One logical notification per transition.

    Recipients are either whole reviewer queues (``recipient_roles``) or
    specific users (``recipient_ids``); the dispatcher resolves roles to the
    active users holding them.
    """
    type: NotificationType
    title: str
    message: str
    entity_id: UUID
    entity_type: str = "supplier"
    recipient_roles: Tuple[str, ...] = field(default_factory=tuple)
    recipient_ids: Tuple[UUID, ...] = field(default_factory=tuple)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    action_url: Optional[str] = None
