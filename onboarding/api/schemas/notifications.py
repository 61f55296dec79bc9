from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: str
    entity_type: Optional[str]
    entity_id: Optional[UUID]
    priority: str
    action_url: Optional[str]
    is_read: bool
    read_at: Optional[datetime]
    email_status: str
    created_at: datetime

    class Config:
        from_attributes = True
