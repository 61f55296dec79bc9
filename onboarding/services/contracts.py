"""Contract service for approved suppliers.

Contracts are issued once an application is fully approved and become
active after legal confirms the signed copy.
"""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from onboarding.core.rbac.roles import UserRole
from onboarding.core.workflow.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from onboarding.core.workflow.events import NotificationPriority, NotificationType, WorkflowEvent
from onboarding.core.workflow.policy import Actor
from onboarding.core.workflow.states import ApplicationStatus
from onboarding.db.models import (
    Contract,
    ContractStatus,
    ContractType,
    Document,
    DocumentType,
    SupplierApplication,
)

logger = logging.getLogger(__name__)

CONTRACT_NUMBER_PREFIX = "CTR"

UPDATABLE_TERMS = (
    "title",
    "description",
    "contract_type",
    "value_amount",
    "currency",
    "start_date",
    "end_date",
    "credit_period",
)


def format_contract_number(year: int, sequence: int) -> str:
    """Format a contract number, e.g. ``CTR-2026-0007``."""
    return f"{CONTRACT_NUMBER_PREFIX}-{year}-{sequence:04d}"


class ContractService:
    """
    Manages supplier contracts.

    Like the workflow service, it flushes and queues events; the caller
    commits and dispatches.
    """

    def __init__(self, db: Session, *, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or datetime.utcnow
        self.events: List[WorkflowEvent] = []

    def get(self, contract_id: UUID) -> Contract:
        contract = self.db.query(Contract).filter(Contract.id == contract_id).first()
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found")
        return contract

    def list(self, *, owner_id: Optional[UUID] = None, status: Optional[str] = None) -> List[Contract]:
        query = self.db.query(Contract)
        if owner_id is not None:
            query = query.join(SupplierApplication).filter(SupplierApplication.submitted_by == owner_id)
        if status:
            query = query.filter(Contract.status == status)
        return query.order_by(Contract.created_at.desc()).all()

    def create(
        self,
        application_id: UUID,
        actor: Actor,
        *,
        title: str,
        description: Optional[str] = None,
        contract_type: str = ContractType.SERVICES.value,
        value_amount: Optional[Decimal] = None,
        currency: str = "KES",
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        credit_period: Optional[int] = None,
    ) -> Contract:
        """
        Issue a draft contract for an approved application.

        Raises:
            NotFoundError: If the application does not exist
            InvalidTransitionError: If the application is not approved
            ConflictError: If the application already has a contract
            ValidationError: If the dates are inverted
        """
        application = (
            self.db.query(SupplierApplication)
            .filter(SupplierApplication.id == application_id)
            .with_for_update()
            .first()
        )
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")

        if application.status != ApplicationStatus.APPROVED.value:
            raise InvalidTransitionError(
                "Contracts can only be created for approved applications",
                action="create_contract",
            )
        if start_date and end_date and end_date < start_date:
            raise ValidationError("Contract end date must be after the start date")

        existing = self.db.query(Contract.id).filter(Contract.application_id == application.id).first()
        if existing is not None:
            raise ConflictError(f"Application {application.id} already has a contract")

        now = self.clock()
        contract = Contract(
            id=uuid.uuid4(),
            application_id=application.id,
            contract_number=self._next_contract_number(now.year),
            title=title,
            description=description,
            contract_type=ContractType(contract_type).value,
            value_amount=value_amount,
            currency=currency,
            start_date=start_date,
            end_date=end_date,
            credit_period=credit_period if credit_period is not None else application.credit_period,
            status=ContractStatus.DRAFT.value,
            created_by=actor.id,
        )
        self.db.add(contract)
        self._flush()

        if application.submitted_by:
            self.events.append(WorkflowEvent(
                type=NotificationType.CONTRACT_CREATED,
                title="Contract Created",
                message=f"Contract {contract.contract_number} has been prepared for {application.supplier_name}",
                entity_id=contract.id,
                entity_type="contract",
                recipient_ids=(application.submitted_by,),
                action_url=f"/contracts/{contract.id}",
            ))

        logger.info("Created contract %s for application %s", contract.contract_number, application.id)
        return contract

    def update(self, contract_id: UUID, **changes) -> Contract:
        """
        Edit the terms of a draft contract.

        Raises:
            NotFoundError: If the contract does not exist
            InvalidTransitionError: If the contract is no longer a draft
            ValidationError: If a required term is cleared or the dates are inverted
        """
        contract = self.get(contract_id)
        if contract.status != ContractStatus.DRAFT.value:
            raise InvalidTransitionError(
                f"Cannot edit a {contract.status} contract",
                action="update_contract",
            )

        unknown = set(changes) - set(UPDATABLE_TERMS)
        if unknown:
            raise ValidationError(f"Cannot update {', '.join(sorted(unknown))}", action="update_contract")
        columns = Contract.__table__.c
        cleared = [field for field, value in changes.items() if value is None and not columns[field].nullable]
        if cleared:
            raise ValidationError(f"{', '.join(cleared)} cannot be cleared", action="update_contract")

        start_date = changes.get("start_date", contract.start_date)
        end_date = changes.get("end_date", contract.end_date)
        if start_date and end_date and end_date < start_date:
            raise ValidationError("Contract end date must be after the start date")

        if changes.get("contract_type") is not None:
            changes["contract_type"] = ContractType(changes["contract_type"]).value
        for field, value in changes.items():
            setattr(contract, field, value)
        self._flush()

        logger.info("Updated contract %s: %s", contract.contract_number, ", ".join(sorted(changes)))
        return contract

    def attach_signed_document(self, contract_id: UUID, document_id: UUID) -> Contract:
        """Link the signed copy (an uploaded document of the same application)."""
        contract = self.get(contract_id)
        if contract.status != ContractStatus.DRAFT.value:
            raise InvalidTransitionError(
                f"Cannot attach a signed document to a {contract.status} contract",
                action="attach_signed_document",
            )

        document = (
            self.db.query(Document)
            .filter(Document.id == document_id, Document.application_id == contract.application_id)
            .first()
        )
        if document is None:
            raise NotFoundError(f"Document {document_id} not found for this contract's application")
        if document.document_type != DocumentType.SIGNED_CONTRACT.value:
            raise ValidationError("Only a signed_contract document can be attached")

        contract.signed_document_id = document.id
        self._flush()
        return contract

    def activate(self, contract_id: UUID, actor: Actor) -> Contract:
        """
        Activate a draft contract once the signed copy is on file.

        Only legal may activate contracts.
        """
        contract = self.get(contract_id)
        if contract.status != ContractStatus.DRAFT.value:
            raise InvalidTransitionError(
                f"Cannot activate a {contract.status} contract",
                action="activate_contract",
            )
        if UserRole(actor.role) != UserRole.LEGAL:
            raise UnauthorizedError("Only legal can activate contracts", action="activate_contract")
        if contract.signed_document_id is None:
            raise ValidationError(
                "A signed contract document is required before activation",
                action="activate_contract",
            )

        contract.status = ContractStatus.ACTIVE.value
        contract.approved_by = actor.id
        contract.approved_at = self.clock()
        self._flush()

        application = contract.application
        self.events.append(WorkflowEvent(
            type=NotificationType.CONTRACT_ACTIVATED,
            title="Contract Activated",
            message=f"Contract {contract.contract_number} for {application.supplier_name} is now active",
            entity_id=contract.id,
            entity_type="contract",
            recipient_roles=(UserRole.PROCUREMENT.value,),
            recipient_ids=(application.submitted_by,) if application.submitted_by else (),
            priority=NotificationPriority.HIGH,
            action_url=f"/contracts/{contract.id}",
        ))

        logger.info("Contract %s activated by %s", contract.contract_number, actor.id)
        return contract

    def _next_contract_number(self, year: int) -> str:
        prefix = f"{CONTRACT_NUMBER_PREFIX}-{year}-"
        numbers = [
            row[0]
            for row in self.db.query(Contract.contract_number)
            .filter(Contract.contract_number.like(f"{prefix}%"))
        ]
        sequence = max((int(n[len(prefix):]) for n in numbers if n[len(prefix):].isdigit()), default=0)
        return format_contract_number(year, sequence + 1)

    def _flush(self) -> None:
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(f"Conflicting contract update: {e.orig}")
