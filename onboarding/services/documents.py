"""Document metadata store.

Binary storage is handled elsewhere; this module only records what was
uploaded and answers the workflow's document-count question.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from onboarding.db.models import Document, DocumentStatus, DocumentType

logger = logging.getLogger(__name__)


class DocumentRepository:
    """Reads and writes document metadata rows."""

    def __init__(self, db: Session):
        self.db = db

    def count_for_application(self, application_id: UUID) -> int:
        return (
            self.db.query(func.count(Document.id))
            .filter(Document.application_id == application_id)
            .scalar()
        ) or 0

    def list_for_application(self, application_id: UUID) -> List[Document]:
        return (
            self.db.query(Document)
            .filter(Document.application_id == application_id)
            .order_by(Document.uploaded_at)
            .all()
        )

    def get(self, application_id: UUID, document_id: UUID) -> Optional[Document]:
        return (
            self.db.query(Document)
            .filter(Document.id == document_id, Document.application_id == application_id)
            .first()
        )

    def add(
        self,
        application_id: UUID,
        *,
        document_type: DocumentType,
        file_name: str,
        uploaded_by: Optional[UUID] = None,
        file_size: Optional[int] = None,
        mime_type: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Document:
        document = Document(
            id=uuid.uuid4(),
            application_id=application_id,
            document_type=DocumentType(document_type).value,
            file_name=file_name,
            file_size=file_size,
            mime_type=mime_type,
            notes=notes,
            uploaded_by=uploaded_by,
        )
        self.db.add(document)
        self.db.flush()
        logger.info("Recorded %s document %s for application %s", document.document_type, file_name, application_id)
        return document

    def delete(self, document: Document) -> None:
        self.db.delete(document)
        self.db.flush()

    def review(
        self,
        document: Document,
        status: DocumentStatus,
        reviewer_id: UUID,
        *,
        notes: Optional[str] = None,
        reviewed_at: Optional[datetime] = None,
    ) -> Document:
        """Record a reviewer's verdict. Notes are kept unless new ones are given."""
        document.status = DocumentStatus(status).value
        if notes is not None:
            document.notes = notes
        document.reviewed_by = reviewer_id
        document.reviewed_at = reviewed_at or datetime.utcnow()
        self.db.flush()
        logger.info("Document %s marked %s by %s", document.id, document.status, reviewer_id)
        return document
