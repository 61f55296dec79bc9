"""Contract endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from onboarding.api.deps import get_db, get_current_user, get_actor
from onboarding.api.schemas.contracts import (
    ContractCreate,
    ContractResponse,
    ContractUpdate,
    SignedDocumentAttach,
)
from onboarding.core.rbac import require_permission
from onboarding.core.rbac.roles import UserRole
from onboarding.core.workflow import Actor, NotFoundError
from onboarding.db.models import User
from onboarding.services.contracts import ContractService
from onboarding.services.notifications import NotificationService

router = APIRouter(prefix="/contracts", tags=["contracts"])


def _load_visible_contract(service: ContractService, contract_id: UUID, user: User):
    contract = service.get(contract_id)
    if user.role == UserRole.SUPPLIER.value and contract.application.submitted_by != user.id:
        raise NotFoundError(f"Contract {contract_id} not found")
    return contract


@router.post("", response_model=ContractResponse, status_code=status.HTTP_201_CREATED)
@require_permission("contracts:create")
async def create_contract(
    contract_in: ContractCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    """Issue a draft contract for an approved application."""
    service = ContractService(db)
    data = contract_in.model_dump(exclude={"application_id"})
    data["contract_type"] = contract_in.contract_type.value
    contract = service.create(contract_in.application_id, actor, **data)

    db.commit()
    response = ContractResponse.model_validate(contract)
    await NotificationService(db).dispatch(service.events)
    return response


@router.get("", response_model=List[ContractResponse])
@require_permission("contracts:list")
async def list_contracts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[str] = Query(None, alias="status"),
):
    """List contracts. Suppliers only see their own."""
    owner_id = current_user.id if current_user.role == UserRole.SUPPLIER.value else None
    contracts = ContractService(db).list(owner_id=owner_id, status=status_filter)
    return [ContractResponse.model_validate(c) for c in contracts]


@router.get("/{contract_id}", response_model=ContractResponse)
@require_permission("contracts:read")
async def get_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contract = _load_visible_contract(ContractService(db), contract_id, current_user)
    return ContractResponse.model_validate(contract)


@router.put("/{contract_id}", response_model=ContractResponse)
@require_permission("contracts:update")
async def update_contract(
    contract_id: UUID,
    contract_in: ContractUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Edit the terms of a draft contract."""
    contract = ContractService(db).update(contract_id, **contract_in.model_dump(exclude_unset=True))
    db.commit()
    return ContractResponse.model_validate(contract)


@router.post("/{contract_id}/signed-document", response_model=ContractResponse)
@require_permission("contracts:update")
async def attach_signed_document(
    contract_id: UUID,
    attachment: SignedDocumentAttach,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Link the supplier's signed copy to the contract."""
    contract = ContractService(db).attach_signed_document(contract_id, attachment.document_id)
    db.commit()
    return ContractResponse.model_validate(contract)


@router.post("/{contract_id}/activate", response_model=ContractResponse)
@require_permission("contracts:activate")
async def activate_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    actor: Actor = Depends(get_actor),
):
    service = ContractService(db)
    contract = service.activate(contract_id, actor)

    db.commit()
    response = ContractResponse.model_validate(contract)
    await NotificationService(db).dispatch(service.events)
    return response
