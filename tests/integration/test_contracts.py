"""Tests for contract issuance, editing and activation."""

from datetime import date, datetime
from uuid import uuid4

import pytest

from onboarding.core.rbac.roles import UserRole
from onboarding.core.workflow import (
    Actor,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from onboarding.core.workflow.events import NotificationType
from onboarding.db.models import DocumentType
from onboarding.services.contracts import ContractService, format_contract_number

from tests.factories import create_application, create_contract, create_document


def actor(user) -> Actor:
    return Actor(user.id, UserRole(user.role))


@pytest.fixture
def approved(db_session, supplier):
    application = create_application(
        db_session, owner=supplier, status="approved", stage="completed",
        vendor_number="V-500", credit_period=60,
    )
    db_session.commit()
    return application


@pytest.fixture
def service(db_session):
    return ContractService(db_session, clock=lambda: datetime(2026, 4, 1, 12, 0))


class TestContractNumbers:

    def test_format(self):
        assert format_contract_number(2026, 7) == "CTR-2026-0007"
        assert format_contract_number(2026, 12345) == "CTR-2026-12345"

    def test_numbers_increase_within_a_year(self, db_session, service, approved, supplier, procurement_user):
        other = create_application(db_session, owner=supplier, status="approved", stage="completed")
        db_session.commit()

        first = service.create(approved.id, actor(procurement_user), title="Supply agreement")
        second = service.create(other.id, actor(procurement_user), title="Second agreement")

        assert first.contract_number == "CTR-2026-0001"
        assert second.contract_number == "CTR-2026-0002"

    def test_numbering_ignores_other_years(self, db_session, service, approved, supplier, procurement_user):
        older = create_application(db_session, owner=supplier, status="approved", stage="completed")
        create_contract(db_session, application=older, contract_number="CTR-2025-0042")
        db_session.commit()

        contract = service.create(approved.id, actor(procurement_user), title="Supply agreement")
        assert contract.contract_number == "CTR-2026-0001"


class TestCreate:

    def test_create_for_approved_application(self, service, approved, supplier, procurement_user):
        contract = service.create(
            approved.id,
            actor(procurement_user),
            title="Supply agreement",
            contract_type="goods",
            start_date=date(2026, 4, 1),
            end_date=date(2027, 3, 31),
        )

        assert contract.status == "draft"
        assert contract.contract_type == "goods"
        assert contract.credit_period == 60
        assert contract.created_by == procurement_user.id
        assert [e.type for e in service.events] == [NotificationType.CONTRACT_CREATED]
        assert service.events[0].recipient_ids == (supplier.id,)

    def test_application_must_be_approved(self, db_session, service, supplier, procurement_user):
        application = create_application(db_session, owner=supplier, status="pending_legal", stage="legal")
        db_session.commit()

        with pytest.raises(InvalidTransitionError):
            service.create(application.id, actor(procurement_user), title="Too early")

    def test_unknown_application(self, service, procurement_user):
        with pytest.raises(NotFoundError):
            service.create(uuid4(), actor(procurement_user), title="Nobody")

    def test_inverted_dates(self, service, approved, procurement_user):
        with pytest.raises(ValidationError):
            service.create(
                approved.id,
                actor(procurement_user),
                title="Backwards",
                start_date=date(2026, 5, 1),
                end_date=date(2026, 4, 1),
            )

    def test_one_contract_per_application(self, service, approved, procurement_user):
        service.create(approved.id, actor(procurement_user), title="Supply agreement")

        with pytest.raises(ConflictError):
            service.create(approved.id, actor(procurement_user), title="Again")


class TestActivation:

    @pytest.fixture
    def contract(self, db_session, service, approved, procurement_user):
        contract = service.create(approved.id, actor(procurement_user), title="Supply agreement")
        db_session.commit()
        service.events.clear()
        return contract

    @pytest.fixture
    def signed_copy(self, db_session, approved):
        document = create_document(
            db_session, application=approved, document_type=DocumentType.SIGNED_CONTRACT,
        )
        db_session.commit()
        return document

    def test_activate(self, service, contract, signed_copy, supplier, legal_user):
        service.attach_signed_document(contract.id, signed_copy.id)
        activated = service.activate(contract.id, actor(legal_user))

        assert activated.status == "active"
        assert activated.approved_by == legal_user.id
        assert activated.approved_at == datetime(2026, 4, 1, 12, 0)

        event = service.events[0]
        assert event.type == NotificationType.CONTRACT_ACTIVATED
        assert event.recipient_roles == ("procurement",)
        assert event.recipient_ids == (supplier.id,)

    def test_signed_copy_required(self, service, contract, legal_user):
        with pytest.raises(ValidationError):
            service.activate(contract.id, actor(legal_user))

    def test_only_legal_activates(self, service, contract, signed_copy, procurement_user):
        service.attach_signed_document(contract.id, signed_copy.id)

        with pytest.raises(UnauthorizedError):
            service.activate(contract.id, actor(procurement_user))

    def test_active_contract_cannot_be_reactivated(self, service, contract, signed_copy, legal_user):
        service.attach_signed_document(contract.id, signed_copy.id)
        service.activate(contract.id, actor(legal_user))

        with pytest.raises(InvalidTransitionError):
            service.activate(contract.id, actor(legal_user))
        with pytest.raises(InvalidTransitionError):
            service.attach_signed_document(contract.id, signed_copy.id)

    def test_attach_wrong_document_type(self, db_session, service, contract, approved):
        certificate = create_document(db_session, application=approved)

        with pytest.raises(ValidationError):
            service.attach_signed_document(contract.id, certificate.id)

    def test_attach_document_of_another_application(
        self, db_session, service, contract, other_supplier
    ):
        elsewhere = create_application(db_session, owner=other_supplier)
        foreign = create_document(
            db_session, application=elsewhere, document_type=DocumentType.SIGNED_CONTRACT,
        )

        with pytest.raises(NotFoundError):
            service.attach_signed_document(contract.id, foreign.id)

    def test_list_by_owner(self, service, contract, supplier, other_supplier):
        assert [c.id for c in service.list(owner_id=supplier.id)] == [contract.id]
        assert service.list(owner_id=other_supplier.id) == []
        assert service.list(status="active") == []


class TestUpdate:

    @pytest.fixture
    def contract(self, db_session, approved):
        contract = create_contract(db_session, application=approved)
        db_session.commit()
        return contract

    def test_update_terms(self, service, contract):
        updated = service.update(
            contract.id,
            title="Revised supply agreement",
            contract_type="consultancy",
            start_date=date(2026, 5, 1),
            end_date=date(2027, 4, 30),
            credit_period=45,
        )

        assert updated.title == "Revised supply agreement"
        assert updated.contract_type == "consultancy"
        assert updated.end_date == date(2027, 4, 30)
        assert updated.credit_period == 45
        assert updated.status == "draft"

    def test_optional_terms_can_be_cleared(self, service, contract):
        service.update(contract.id, description="Office supplies")
        updated = service.update(contract.id, description=None)
        assert updated.description is None

    def test_required_terms_cannot_be_cleared(self, service, contract):
        with pytest.raises(ValidationError):
            service.update(contract.id, title=None)
        with pytest.raises(ValidationError):
            service.update(contract.id, currency=None)

    def test_end_date_checked_against_existing_start(self, service, contract):
        service.update(contract.id, start_date=date(2026, 5, 1))

        with pytest.raises(ValidationError):
            service.update(contract.id, end_date=date(2026, 4, 1))

    def test_status_is_not_a_term(self, service, contract):
        with pytest.raises(ValidationError):
            service.update(contract.id, status="active")
        assert contract.status == "draft"

    def test_active_contract_is_frozen(self, db_session, service, approved):
        active = create_contract(db_session, application=approved, status="active")

        with pytest.raises(InvalidTransitionError):
            service.update(active.id, title="Too late")

    def test_unknown_contract(self, service):
        with pytest.raises(NotFoundError):
            service.update(uuid4(), title="Nothing")
