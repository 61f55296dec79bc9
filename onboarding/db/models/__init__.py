"""Database models for the supplier onboarding portal."""

from onboarding.db.models.user import User
from onboarding.db.models.application import (
    SupplierApplication,
    ApprovalHistoryEntry,
    ProfileUpdateRequest,
)
from onboarding.db.models.document import Document, DocumentType, DocumentStatus
from onboarding.db.models.contract import Contract, ContractType, ContractStatus
from onboarding.db.models.notification import Notification, EmailStatus
from onboarding.db.models.password_reset import PasswordResetToken

__all__ = [
    "User",
    "SupplierApplication",
    "ApprovalHistoryEntry",
    "ProfileUpdateRequest",
    "Document",
    "DocumentType",
    "DocumentStatus",
    "Contract",
    "ContractType",
    "ContractStatus",
    "Notification",
    "EmailStatus",
    "PasswordResetToken",
]
