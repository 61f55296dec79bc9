"""Supplier contract model."""

import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Integer, Numeric, Text, Uuid
from sqlalchemy.orm import relationship

from onboarding.db.base import Base


class ContractType(str, Enum):
    SERVICES = "services"
    GOODS = "goods"
    CONSULTANCY = "consultancy"
    SUBSCRIPTION = "subscription"
    OTHER = "other"


class ContractStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class Contract(Base):
    """
    Contract issued to an approved supplier.

    One contract per application; it becomes active once legal confirms
    the signed copy.
    """
    __tablename__ = "contracts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(
        Uuid, ForeignKey("supplier_applications.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    contract_number = Column(String(50), unique=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    contract_type = Column(String(50), nullable=False, default=ContractType.SERVICES.value)

    # Commercial terms
    value_amount = Column(Numeric(14, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="KES")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    credit_period = Column(Integer, nullable=True)  # days

    status = Column(String(20), nullable=False, default=ContractStatus.DRAFT.value, index=True)
    signed_document_id = Column(Uuid, ForeignKey("documents.id", ondelete="SET NULL"), nullable=True)

    created_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    application = relationship("SupplierApplication", back_populates="contract")
    signed_document = relationship("Document")

    def __repr__(self) -> str:
        return f"<Contract {self.contract_number} [{self.status}]>"
