"""Document metadata model.

Only metadata is tracked here; the file bytes live in external storage.
"""

import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship

from onboarding.db.base import Base


class DocumentType(str, Enum):
    """Supporting documents a supplier can attach."""
    CERTIFICATE_OF_INCORPORATION = "certificate_of_incorporation"
    CR12 = "cr12"
    PIN_CERTIFICATE = "pin_certificate"
    DIRECTORS_ID = "directors_id"
    COMPANY_PROFILE = "company_profile"
    BANK_REFERENCE = "bank_reference"
    AUDITED_FINANCIALS = "audited_financials"
    TAX_COMPLIANCE = "tax_compliance"
    NATIONAL_ID = "national_id"
    PASSPORT = "passport"
    SOURCE_FUNDS_DECLARATION = "source_funds_declaration"
    DATA_PROCESSING_CONSENT = "data_processing_consent"
    SIGNED_CONTRACT = "signed_contract"
    OTHER = "other"


class DocumentStatus(str, Enum):
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(
        Uuid, ForeignKey("supplier_applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_type = Column(String(50), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=True)  # bytes
    mime_type = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=DocumentStatus.PENDING_REVIEW.value)
    notes = Column(Text, nullable=True)
    uploaded_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    reviewed_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    # Relationships
    application = relationship("SupplierApplication", back_populates="documents")

    def __repr__(self) -> str:
        return f"<Document {self.file_name} ({self.document_type})>"
