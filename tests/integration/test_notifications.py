"""Tests for notification dispatch."""

import asyncio
from uuid import uuid4

import pytest

from onboarding.core.rbac.roles import UserRole
from onboarding.core.workflow.events import NotificationPriority, NotificationType, WorkflowEvent
from onboarding.db.models import Notification
from onboarding.services.notifications import NotificationService

from tests.factories import create_user


def make_event(**overrides) -> WorkflowEvent:
    values = dict(
        type=NotificationType.APPLICATION_SUBMITTED,
        title="New Supplier Application",
        message="Supplier application from Acme Ltd requires procurement review",
        entity_id=uuid4(),
        action_url="/suppliers/123",
    )
    values.update(overrides)
    return WorkflowEvent(**values)


def dispatch(db_session, *events):
    return asyncio.run(NotificationService(db_session).dispatch(events))


class TestRecipients:

    def test_role_recipients_are_active_users_only(self, db_session, procurement_user, legal_user):
        create_user(db_session, role=UserRole.PROCUREMENT, is_active=False)
        db_session.commit()

        delivered = dispatch(db_session, make_event(recipient_roles=("procurement",)))

        assert [n.recipient_id for n in delivered] == [procurement_user.id]
        notification = delivered[0]
        assert notification.type == "application_submitted"
        assert notification.entity_type == "supplier"
        assert notification.priority == "medium"
        assert notification.email_status == "skipped"
        assert notification.is_read is False

    def test_roles_and_ids_are_merged(self, db_session, supplier, procurement_user, legal_user):
        event = make_event(
            type=NotificationType.APPLICATION_APPROVED,
            recipient_roles=("legal",),
            recipient_ids=(supplier.id, legal_user.id),
            priority=NotificationPriority.HIGH,
        )

        delivered = dispatch(db_session, event)

        assert {n.recipient_id for n in delivered} == {supplier.id, legal_user.id}
        assert db_session.query(Notification).count() == 2

    def test_inactive_explicit_recipient_skipped(self, db_session):
        former = create_user(db_session, is_active=False)
        db_session.commit()

        assert dispatch(db_session, make_event(recipient_ids=(former.id,))) == []
        assert db_session.query(Notification).count() == 0

    def test_failing_event_does_not_block_others(self, db_session, monkeypatch, supplier, procurement_user):
        original = NotificationService._resolve_recipients

        def flaky(self, event):
            if event.type == NotificationType.APPLICATION_REJECTED:
                raise RuntimeError("recipient lookup failed")
            return original(self, event)

        monkeypatch.setattr(NotificationService, "_resolve_recipients", flaky)

        delivered = dispatch(
            db_session,
            make_event(type=NotificationType.APPLICATION_REJECTED, recipient_ids=(supplier.id,)),
            make_event(recipient_roles=("procurement",)),
        )

        assert [n.recipient_id for n in delivered] == [procurement_user.id]


class TestEmail:

    def test_email_sent_when_smtp_configured(self, db_session, smtp_enabled, sent_mail, supplier):
        delivered = dispatch(db_session, make_event(recipient_ids=(supplier.id,)))

        assert delivered[0].email_status == "sent"
        message, kwargs = sent_mail[0]
        assert message["To"] == "supplier@example.com"
        assert message["Subject"] == "[Supplier Onboarding System] New Supplier Application"
        assert kwargs["hostname"] == "smtp.example.com"

        body = message.get_payload()[0].get_payload(decode=True).decode()
        assert "http://localhost:3000/suppliers/123" in body

    def test_email_content_is_escaped(self, db_session, smtp_enabled, sent_mail, supplier):
        dispatch(db_session, make_event(message="<script>alert(1)</script>", recipient_ids=(supplier.id,)))

        body = sent_mail[0][0].get_payload()[0].get_payload(decode=True).decode()
        assert "<script>" not in body
        assert "&lt;script&gt;" in body

    def test_email_failure_is_recorded(self, db_session, monkeypatch, smtp_enabled, supplier):
        async def broken_send(message, **kwargs):
            raise OSError("connection refused")

        monkeypatch.setattr("onboarding.services.notifications.aiosmtplib.send", broken_send)

        delivered = dispatch(db_session, make_event(recipient_ids=(supplier.id,)))

        assert len(delivered) == 1
        assert delivered[0].email_status == "failed"
        assert db_session.query(Notification).count() == 1


class TestInbox:

    def test_list_and_mark_read(self, db_session, supplier, other_supplier):
        dispatch(
            db_session,
            make_event(recipient_ids=(supplier.id,)),
            make_event(type=NotificationType.MORE_INFO_REQUIRED, recipient_ids=(supplier.id,)),
            make_event(recipient_ids=(other_supplier.id,)),
        )
        service = NotificationService(db_session)

        inbox = service.list_for_user(supplier.id)
        assert len(inbox) == 2

        service.mark_read(inbox[0])
        db_session.commit()

        assert inbox[0].read_at is not None
        assert len(service.list_for_user(supplier.id, unread_only=True)) == 1
        assert len(service.list_for_user(other_supplier.id)) == 1
