"""Notification dispatch for workflow events.

Handles:
- Resolving event recipients (reviewer queues and individual users)
- Recording in-app notifications
- Email delivery over SMTP when configured
- Password reset emails, which carry a token and so never become in-app rows

Dispatch runs after the triggering transition has committed. Delivery
failures are logged and never propagate to the caller.
"""

import logging
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Iterable, List, Optional
from uuid import UUID

import aiosmtplib
from jinja2 import Template
from sqlalchemy.orm import Session

from onboarding.core.config import get_settings
from onboarding.core.workflow.events import WorkflowEvent
from onboarding.db.models import EmailStatus, Notification, User

logger = logging.getLogger(__name__)


EMAIL_SUBJECT = "[{{ company_name }}] {{ title }}"

EMAIL_TEMPLATE = Template(
    """\
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #333;">
    <h2 style="color: #1f3b57;">{{ title }}</h2>
    <p>Dear {{ recipient_name }},</p>
    <p>{{ message }}</p>
    {% if action_url %}
    <p>
      <a href="{{ action_url }}"
         style="background: #1f3b57; color: #fff; padding: 10px 18px; text-decoration: none;">
        View in portal
      </a>
    </p>
    {% endif %}
    <hr>
    <p style="font-size: 12px; color: #888;">
      This is an automated message from the {{ company_name }} supplier portal.
    </p>
  </body>
</html>
""",
    autoescape=True,
)

PASSWORD_RESET_TEMPLATE = Template(
    """\
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #333;">
    <h2 style="color: #1f3b57;">Password Reset</h2>
    <p>Dear {{ recipient_name }},</p>
    <p>A password reset was requested for your {{ company_name }} supplier portal account.</p>
    <p>
      <a href="{{ reset_url }}"
         style="background: #1f3b57; color: #fff; padding: 10px 18px; text-decoration: none;">
        Choose a new password
      </a>
    </p>
    <p>The link expires in {{ expire_minutes }} minutes. If you did not ask for this, ignore this email.</p>
  </body>
</html>
""",
    autoescape=True,
)


class NotificationService:
    """
    Service for delivering workflow notifications in-app and by email.
    """

    def __init__(self, db: Session):
        """
        Initialize notification service.

        Args:
            db: Database session
        """
        self.db = db
        self.settings = get_settings()

    async def dispatch(self, events: Iterable[WorkflowEvent]) -> List[Notification]:
        """
        Deliver each event to its recipients.

        Returns the notifications that were recorded. A failing event is
        logged and skipped; the remaining events are still delivered.
        """
        delivered: List[Notification] = []
        for event in events:
            try:
                delivered.extend(await self._dispatch_event(event))
            except Exception:
                logger.exception(
                    "Failed to dispatch %s notification for %s %s",
                    event.type.value, event.entity_type, event.entity_id,
                )
                self.db.rollback()
        return delivered

    def list_for_user(self, user_id: UUID, *, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.recipient_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)  # noqa: E712
        return query.order_by(Notification.created_at.desc()).limit(limit).all()

    def mark_read(self, notification: Notification) -> Notification:
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            self.db.flush()
        return notification

    async def send_password_reset(self, user: User, token: str) -> str:
        """Email a reset link; returns the email status. Failures are logged, never raised."""
        if not self.settings.smtp_enabled:
            logger.warning("SMTP is not configured; password reset email for %s not sent", user.email)
            return EmailStatus.SKIPPED.value

        context = {
            "company_name": self.settings.company_name,
            "title": "Password Reset",
            "recipient_name": user.full_name or user.email,
            "reset_url": self._absolute_url(f"/reset-password/{token}"),
            "expire_minutes": self.settings.password_reset_expire_minutes,
        }
        subject = Template(EMAIL_SUBJECT).render(**context)
        body = PASSWORD_RESET_TEMPLATE.render(**context)

        try:
            await self._deliver_email(user.email, subject, body)
        except Exception:
            logger.exception("Failed to send password reset email to %s", user.email)
            return EmailStatus.FAILED.value

        logger.info("Sent password reset email to %s", user.email)
        return EmailStatus.SENT.value

    async def _dispatch_event(self, event: WorkflowEvent) -> List[Notification]:
        recipients = self._resolve_recipients(event)
        if not recipients:
            logger.info("No recipients for %s notification on %s", event.type.value, event.entity_id)
            return []

        notifications = []
        for user in recipients:
            notification = Notification(
                recipient_id=user.id,
                type=event.type.value,
                title=event.title,
                message=event.message,
                entity_type=event.entity_type,
                entity_id=event.entity_id,
                priority=event.priority.value,
                action_url=event.action_url,
                email_status=EmailStatus.SKIPPED.value,
            )
            self.db.add(notification)
            notifications.append((user, notification))
        self.db.flush()

        if self.settings.smtp_enabled:
            for user, notification in notifications:
                notification.email_status = await self._send_email(user, event)

        self.db.commit()
        return [notification for _, notification in notifications]

    def _resolve_recipients(self, event: WorkflowEvent) -> List[User]:
        """Active users holding a recipient role, plus explicit recipients."""
        users = {}
        if event.recipient_roles:
            for user in self.db.query(User).filter(
                User.role.in_(event.recipient_roles),
                User.is_active == True,  # noqa: E712
            ):
                users[user.id] = user
        if event.recipient_ids:
            for user in self.db.query(User).filter(User.id.in_(event.recipient_ids)):
                if user.is_active:
                    users[user.id] = user
        return list(users.values())

    async def _send_email(self, user: User, event: WorkflowEvent) -> str:
        """Send one email; returns the resulting email status."""
        context = {
            "company_name": self.settings.company_name,
            "title": event.title,
            "message": event.message,
            "recipient_name": user.full_name or user.email,
            "action_url": self._absolute_url(event.action_url),
        }
        subject = Template(EMAIL_SUBJECT).render(**context)
        body = EMAIL_TEMPLATE.render(**context)

        try:
            await self._deliver_email(user.email, subject, body)
        except Exception:
            logger.exception("Failed to send %s email to %s", event.type.value, user.email)
            return EmailStatus.FAILED.value

        logger.info("Sent %s email to %s", event.type.value, user.email)
        return EmailStatus.SENT.value

    async def _deliver_email(self, to_email: str, subject: str, html_body: str) -> None:
        """Actually deliver the email via SMTP."""
        msg = MIMEMultipart("alternative")
        msg["From"] = f"{self.settings.smtp_from_name} <{self.settings.smtp_from_email}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(html_body, "html"))

        await aiosmtplib.send(
            msg,
            hostname=self.settings.smtp_host,
            port=self.settings.smtp_port,
            username=self.settings.smtp_user,
            password=self.settings.smtp_password,
            use_tls=self.settings.smtp_use_tls,
            start_tls=self.settings.smtp_start_tls if not self.settings.smtp_use_tls else None,
            timeout=self.settings.smtp_timeout,
        )

    def _absolute_url(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return f"{self.settings.client_url.rstrip('/')}{path}"
