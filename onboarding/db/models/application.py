"""Supplier application database models.

Stores the application record, its append-only approval history and the
profile update requests raised against it.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Integer, Boolean, UniqueConstraint, Uuid, event
from sqlalchemy.orm import relationship

from onboarding.db.base import Base


class SupplierApplication(Base):
    """
    A supplier's onboarding application.

    ``status`` and ``current_approval_stage`` are owned by the workflow
    engine; nothing else should write them.
    """
    __tablename__ = "supplier_applications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Company details
    supplier_name = Column(String(255), nullable=False, index=True)
    legal_nature = Column(String(50), nullable=False, default="company")
    service_type = Column(String(100), nullable=False)
    company_registration_number = Column(String(100), nullable=True)
    company_email = Column(String(255), nullable=False)
    company_phone = Column(String(50), nullable=True)
    physical_address = Column(Text, nullable=True)

    # Primary contact
    contact_name = Column(String(200), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    credit_period = Column(Integer, nullable=False, default=30)  # days

    # Workflow state
    status = Column(String(50), nullable=False, default="draft", index=True)
    current_approval_stage = Column(String(50), nullable=False, default="procurement", index=True)
    vendor_number = Column(String(100), unique=True, nullable=True)

    # SLA tracking
    sla_submission_date = Column(DateTime, nullable=True)
    sla_expected_completion_date = Column(DateTime, nullable=True)
    sla_actual_completion_date = Column(DateTime, nullable=True)
    sla_days_to_complete = Column(Integer, nullable=True)
    sla_is_overdue = Column(Boolean, nullable=False, default=False)

    # Ownership and outcome
    submitted_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    submitted_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # Optimistic concurrency counter
    version = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    owner = relationship("User", back_populates="applications", foreign_keys=[submitted_by])
    approval_history = relationship(
        "ApprovalHistoryEntry",
        back_populates="application",
        order_by="ApprovalHistoryEntry.sequence",
        cascade="all, delete-orphan",
    )
    profile_update_requests = relationship(
        "ProfileUpdateRequest",
        back_populates="application",
        order_by="ProfileUpdateRequest.sequence",
        cascade="all, delete-orphan",
    )
    documents = relationship(
        "Document",
        back_populates="application",
        order_by="Document.uploaded_at",
        cascade="all, delete-orphan",
    )
    contract = relationship("Contract", back_populates="application", uselist=False)

    @property
    def sla_metrics(self) -> dict:
        return {
            "submission_date": self.sla_submission_date,
            "expected_completion_date": self.sla_expected_completion_date,
            "actual_completion_date": self.sla_actual_completion_date,
            "days_to_complete": self.sla_days_to_complete,
            "is_overdue": bool(self.sla_is_overdue),
        }

    def __repr__(self) -> str:
        return f"<SupplierApplication {self.supplier_name} [{self.status}/{self.current_approval_stage}]>"


class ApprovalHistoryEntry(Base):
    """
    One reviewer decision on an application.

    Entries are only ever inserted; ``sequence`` fixes their order.
    """
    __tablename__ = "approval_history"
    __table_args__ = (
        UniqueConstraint("application_id", "sequence", name="uq_approval_history_application_sequence"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(
        Uuid, ForeignKey("supplier_applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence = Column(Integer, nullable=False)
    approver_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), nullable=False)
    stage = Column(String(50), nullable=False)
    comments = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    application = relationship("SupplierApplication", back_populates="approval_history")
    approver = relationship("User")

    def __repr__(self) -> str:
        return f"<ApprovalHistoryEntry #{self.sequence} {self.action}@{self.stage}>"


@event.listens_for(ApprovalHistoryEntry, "before_update")
def _history_is_append_only(mapper, connection, target):
    raise ValueError("Approval history entries cannot be modified")


class ProfileUpdateRequest(Base):
    """A supplier-proposed change to one profile field, pending staff review."""
    __tablename__ = "profile_update_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(
        Uuid, ForeignKey("supplier_applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence = Column(Integer, nullable=False)
    field = Column(String(100), nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    requested_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    requested_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    processed_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    processed_at = Column(DateTime, nullable=True)

    # Relationships
    application = relationship("SupplierApplication", back_populates="profile_update_requests")

    def __repr__(self) -> str:
        return f"<ProfileUpdateRequest {self.field} [{self.status}]>"
