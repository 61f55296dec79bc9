"""Document metadata endpoints, nested under an application."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from onboarding.api.deps import get_db, get_current_user
from onboarding.api.routers.applications import load_visible_application
from onboarding.api.schemas.applications import DocumentCreate, DocumentResponse, DocumentReview
from onboarding.core.rbac import require_permission
from onboarding.core.workflow import InvalidTransitionError, NotFoundError, UnauthorizedError
from onboarding.core.workflow.states import EDITABLE_STATES, ApplicationStatus
from onboarding.db.models import DocumentType, User
from onboarding.services.documents import DocumentRepository

router = APIRouter(prefix="/applications/{application_id}/documents", tags=["documents"])


def _check_can_change_documents(application, user: User, document_type: Optional[DocumentType] = None) -> None:
    if application.submitted_by != user.id:
        raise UnauthorizedError("Only the owning supplier may change documents", action="documents")

    app_status = ApplicationStatus(application.status)
    # The signed contract is uploaded after approval
    if document_type == DocumentType.SIGNED_CONTRACT and app_status == ApplicationStatus.APPROVED:
        return
    if app_status not in EDITABLE_STATES:
        raise InvalidTransitionError(
            f"Documents cannot be changed while the application is {application.status}",
            action="documents",
        )


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
@require_permission("documents:create")
async def add_document(
    application_id: UUID,
    document_in: DocumentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record an uploaded document's metadata."""
    application = load_visible_application(db, application_id, current_user)
    _check_can_change_documents(application, current_user, document_in.document_type)

    document = DocumentRepository(db).add(
        application.id,
        uploaded_by=current_user.id,
        **document_in.model_dump(),
    )
    db.commit()
    return DocumentResponse.model_validate(document)


@router.get("", response_model=List[DocumentResponse])
@require_permission("documents:list")
async def list_documents(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    application = load_visible_application(db, application_id, current_user)
    return [DocumentResponse.model_validate(d) for d in DocumentRepository(db).list_for_application(application.id)]


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
@require_permission("documents:delete")
async def delete_document(
    application_id: UUID,
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    application = load_visible_application(db, application_id, current_user)
    _check_can_change_documents(application, current_user)

    documents = DocumentRepository(db)
    document = documents.get(application.id, document_id)
    if document is None:
        raise NotFoundError(f"Document {document_id} not found")

    documents.delete(document)
    db.commit()


@router.put("/{document_id}/status", response_model=DocumentResponse)
@require_permission("documents:review")
async def review_document(
    application_id: UUID,
    document_id: UUID,
    review: DocumentReview,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Reviewers mark a document approved, rejected, or back to pending."""
    application = load_visible_application(db, application_id, current_user)

    documents = DocumentRepository(db)
    document = documents.get(application.id, document_id)
    if document is None:
        raise NotFoundError(f"Document {document_id} not found")

    documents.review(document, review.status, current_user.id, notes=review.notes)
    db.commit()
    return DocumentResponse.model_validate(document)
