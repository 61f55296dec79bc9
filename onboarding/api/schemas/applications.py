"""Supplier application schemas."""

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from onboarding.db.models import DocumentStatus, DocumentType


class ApplicationCreate(BaseModel):
    supplier_name: str = Field(..., min_length=1, max_length=255)
    legal_nature: str = Field("company", max_length=50)
    service_type: str = Field(..., min_length=1, max_length=100)
    company_registration_number: Optional[str] = None
    company_email: EmailStr
    company_phone: Optional[str] = None
    physical_address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    credit_period: int = Field(30, ge=0)


class ApplicationUpdate(BaseModel):
    """Owner edits while the application is a draft or sent back."""
    supplier_name: Optional[str] = Field(None, min_length=1, max_length=255)
    legal_nature: Optional[str] = Field(None, max_length=50)
    service_type: Optional[str] = Field(None, min_length=1, max_length=100)
    company_registration_number: Optional[str] = None
    company_email: Optional[EmailStr] = None
    company_phone: Optional[str] = None
    physical_address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    credit_period: Optional[int] = Field(None, ge=0)


class SlaMetrics(BaseModel):
    submission_date: Optional[datetime]
    expected_completion_date: Optional[datetime]
    actual_completion_date: Optional[datetime]
    days_to_complete: Optional[int]
    is_overdue: bool


class ApprovalHistoryResponse(BaseModel):
    id: UUID
    sequence: int
    approver_id: Optional[UUID]
    action: str
    stage: str
    comments: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdateResponse(BaseModel):
    id: UUID
    application_id: UUID
    field: str
    old_value: Optional[str]
    new_value: str
    status: str
    requested_by: Optional[UUID]
    requested_at: datetime
    processed_by: Optional[UUID]
    processed_at: Optional[datetime]

    class Config:
        from_attributes = True


class ApplicationSummary(BaseModel):
    id: UUID
    supplier_name: str
    service_type: str
    status: str
    current_approval_stage: str
    vendor_number: Optional[str]
    submitted_by: Optional[UUID]
    submitted_at: Optional[datetime]
    sla_metrics: SlaMetrics
    created_at: datetime

    class Config:
        from_attributes = True


class ApplicationResponse(ApplicationSummary):
    legal_nature: str
    company_registration_number: Optional[str]
    company_email: str
    company_phone: Optional[str]
    physical_address: Optional[str]
    contact_name: Optional[str]
    contact_email: Optional[str]
    contact_phone: Optional[str]
    credit_period: int
    approved_at: Optional[datetime]
    rejected_at: Optional[datetime]
    rejection_reason: Optional[str]
    approval_history: List[ApprovalHistoryResponse] = []
    profile_update_requests: List[ProfileUpdateResponse] = []
    version: int
    updated_at: datetime


class ApprovalAction(BaseModel):
    comments: Optional[str] = None


class VendorNumberAssign(BaseModel):
    vendor_number: str = Field(..., min_length=1, max_length=100)


class ProfileUpdateCreate(BaseModel):
    field: str
    new_value: Union[str, int]


class ProfileUpdateResolve(BaseModel):
    decision: str = Field(..., description="'approved' or 'rejected'")


class DocumentCreate(BaseModel):
    document_type: DocumentType
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = None
    notes: Optional[str] = None


class DocumentReview(BaseModel):
    status: DocumentStatus
    notes: Optional[str] = None


class DocumentResponse(BaseModel):
    id: UUID
    application_id: UUID
    document_type: str
    file_name: str
    file_size: Optional[int]
    mime_type: Optional[str]
    status: str
    notes: Optional[str]
    uploaded_by: Optional[UUID]
    uploaded_at: datetime
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
