"""In-app notification model."""

import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Text, Uuid
from sqlalchemy.orm import relationship

from onboarding.db.base import Base


class EmailStatus(str, Enum):
    """Outcome of the email copy of a notification."""
    SKIPPED = "skipped"
    SENT = "sent"
    FAILED = "failed"


class Notification(Base):
    """
    A notification delivered to one user.

    Created by the dispatcher after a workflow transition commits.
    """
    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    recipient_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Uuid, nullable=True)
    priority = Column(String(10), nullable=False, default="medium")
    action_url = Column(String(500), nullable=True)

    is_read = Column(Boolean, nullable=False, default=False, index=True)
    read_at = Column(DateTime, nullable=True)
    email_status = Column(String(20), nullable=False, default=EmailStatus.SKIPPED.value)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    recipient = relationship("User", back_populates="notifications")

    def __repr__(self) -> str:
        return f"<Notification {self.type} -> {self.recipient_id}>"
