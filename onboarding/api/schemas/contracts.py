from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from onboarding.db.models import ContractType


class ContractCreate(BaseModel):
    application_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    contract_type: ContractType = ContractType.SERVICES
    value_amount: Optional[Decimal] = Field(None, ge=0)
    currency: str = Field("KES", min_length=3, max_length=3)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    credit_period: Optional[int] = Field(None, ge=0)


class ContractUpdate(BaseModel):
    """Partial update of a draft contract's terms."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    contract_type: Optional[ContractType] = None
    value_amount: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    credit_period: Optional[int] = Field(None, ge=0)


class SignedDocumentAttach(BaseModel):
    document_id: UUID


class ContractResponse(BaseModel):
    id: UUID
    application_id: UUID
    contract_number: str
    title: str
    description: Optional[str]
    contract_type: str
    value_amount: Optional[Decimal]
    currency: str
    start_date: Optional[date]
    end_date: Optional[date]
    credit_period: Optional[int]
    status: str
    signed_document_id: Optional[UUID]
    created_by: Optional[UUID]
    approved_by: Optional[UUID]
    approved_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True
