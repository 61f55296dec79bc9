"""Initial schema: users, supplier applications, approval history, documents, contracts, notifications

Revision ID: 0001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    # --- users (no FK deps) ---
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    # --- supplier_applications (FK -> users) ---
    op.create_table(
        "supplier_applications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("supplier_name", sa.String(255), nullable=False),
        sa.Column("legal_nature", sa.String(50), nullable=False, server_default="company"),
        sa.Column("service_type", sa.String(100), nullable=False),
        sa.Column("company_registration_number", sa.String(100), nullable=True),
        sa.Column("company_email", sa.String(255), nullable=False),
        sa.Column("company_phone", sa.String(50), nullable=True),
        sa.Column("physical_address", sa.Text(), nullable=True),
        sa.Column("contact_name", sa.String(200), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("credit_period", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("status", sa.String(50), nullable=False, server_default="draft"),
        sa.Column("current_approval_stage", sa.String(50), nullable=False, server_default="procurement"),
        sa.Column("vendor_number", sa.String(100), nullable=True),
        sa.Column("sla_submission_date", sa.DateTime(), nullable=True),
        sa.Column("sla_expected_completion_date", sa.DateTime(), nullable=True),
        sa.Column("sla_actual_completion_date", sa.DateTime(), nullable=True),
        sa.Column("sla_days_to_complete", sa.Integer(), nullable=True),
        sa.Column("sla_is_overdue", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("submitted_by", sa.Uuid(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_supplier_applications"),
        sa.ForeignKeyConstraint(
            ["submitted_by"],
            ["users.id"],
            name="fk_supplier_applications_submitted_by_users",
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint("vendor_number", name="uq_supplier_applications_vendor_number"),
    )
    op.create_index("ix_supplier_applications_supplier_name", "supplier_applications", ["supplier_name"])
    op.create_index("ix_supplier_applications_status", "supplier_applications", ["status"])
    op.create_index(
        "ix_supplier_applications_current_approval_stage",
        "supplier_applications",
        ["current_approval_stage"],
    )
    op.create_index("ix_supplier_applications_submitted_by", "supplier_applications", ["submitted_by"])
    op.create_index("ix_supplier_applications_created_at", "supplier_applications", ["created_at"])

    # --- approval_history (FK -> supplier_applications, users) ---
    op.create_table(
        "approval_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("application_id", sa.Uuid(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("approver_id", sa.Uuid(), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("stage", sa.String(50), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_approval_history"),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["supplier_applications.id"],
            name="fk_approval_history_application_id_supplier_applications",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["approver_id"],
            ["users.id"],
            name="fk_approval_history_approver_id_users",
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint("application_id", "sequence", name="uq_approval_history_application_sequence"),
    )
    op.create_index("ix_approval_history_application_id", "approval_history", ["application_id"])

    # --- profile_update_requests (FK -> supplier_applications, users) ---
    op.create_table(
        "profile_update_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("application_id", sa.Uuid(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("field", sa.String(100), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("requested_by", sa.Uuid(), nullable=True),
        sa.Column("requested_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("processed_by", sa.Uuid(), nullable=True),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_profile_update_requests"),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["supplier_applications.id"],
            name="fk_profile_update_requests_application_id_supplier_applications",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["requested_by"],
            ["users.id"],
            name="fk_profile_update_requests_requested_by_users",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["processed_by"],
            ["users.id"],
            name="fk_profile_update_requests_processed_by_users",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_profile_update_requests_application_id", "profile_update_requests", ["application_id"])
    op.create_index("ix_profile_update_requests_status", "profile_update_requests", ["status"])

    # --- documents (FK -> supplier_applications, users) ---
    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("application_id", sa.Uuid(), nullable=False),
        sa.Column("document_type", sa.String(50), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending_review"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("uploaded_by", sa.Uuid(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_documents"),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["supplier_applications.id"],
            name="fk_documents_application_id_supplier_applications",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["uploaded_by"],
            ["users.id"],
            name="fk_documents_uploaded_by_users",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_documents_application_id", "documents", ["application_id"])

    # --- contracts (FK -> supplier_applications, documents, users) ---
    op.create_table(
        "contracts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("application_id", sa.Uuid(), nullable=False),
        sa.Column("contract_number", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("contract_type", sa.String(50), nullable=False, server_default="services"),
        sa.Column("value_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False, server_default="KES"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("credit_period", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("signed_document_id", sa.Uuid(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("approved_by", sa.Uuid(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_contracts"),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["supplier_applications.id"],
            name="fk_contracts_application_id_supplier_applications",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["signed_document_id"],
            ["documents.id"],
            name="fk_contracts_signed_document_id_documents",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["created_by"], ["users.id"], name="fk_contracts_created_by_users", ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["approved_by"], ["users.id"], name="fk_contracts_approved_by_users", ondelete="SET NULL"
        ),
        sa.UniqueConstraint("application_id", name="uq_contracts_application_id"),
        sa.UniqueConstraint("contract_number", name="uq_contracts_contract_number"),
    )
    op.create_index("ix_contracts_status", "contracts", ["status"])

    # --- notifications (FK -> users) ---
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("recipient_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=True),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("action_url", sa.String(500), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("email_status", sa.String(20), nullable=False, server_default="skipped"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(
            ["recipient_id"],
            ["users.id"],
            name="fk_notifications_recipient_id_users",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_notifications_recipient_id", "notifications", ["recipient_id"])
    op.create_index("ix_notifications_is_read", "notifications", ["is_read"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("notifications")
    op.drop_table("contracts")
    op.drop_table("documents")
    op.drop_table("profile_update_requests")
    op.drop_table("approval_history")
    op.drop_table("supplier_applications")
    op.drop_table("users")
