"""Initial schema: leave requests, policies, balances, audit log and Zoho integration.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_days", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="pending", nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("comments", sa.String(), nullable=True),
        sa.Column("attachment_url", sa.String(length=2048), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_leave_request_company_id", "leave_request", ["company_id"])
    op.create_index("ix_leave_request_user_id", "leave_request", ["user_id"])
    op.create_index("ix_leave_request_status", "leave_request", ["status"])
    op.create_index("ix_leave_request_company_status", "leave_request", ["company_id", "status"])
    op.create_index("ix_leave_request_user_dates", "leave_request", ["user_id", "start_date", "end_date"])

    op.create_table(
        "leave_approval",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "leave_request_id",
            sa.Uuid(),
            sa.ForeignKey("leave_request.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("approver_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("comments", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_leave_approval_leave_request_id", "leave_approval", ["leave_request_id"])

    op.create_table(
        "leave_policy",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("days_per_year", sa.Float(), nullable=False),
        sa.Column("max_consecutive_days", sa.Integer(), nullable=True),
        sa.Column("carryover_days", sa.Float(), nullable=True),
        sa.Column("requires_approval", sa.Boolean(), nullable=False),
        sa.Column("requires_documentation", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_leave_policy_company_id", "leave_policy", ["company_id"])
    op.create_index("ix_leave_policy_company_type", "leave_policy", ["company_id", "leave_type"])

    op.create_table(
        "leave_balance",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total_days", sa.Float(), server_default="0", nullable=False),
        sa.Column("used_days", sa.Float(), server_default="0", nullable=False),
        sa.Column("available_days", sa.Float(), server_default="0", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "user_id", "leave_type", "year", name="uq_leave_balance_user_type_year"),
    )
    op.create_index("ix_leave_balance_company_id", "leave_balance", ["company_id"])
    op.create_index("ix_leave_balance_user_id", "leave_balance", ["user_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=True),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_log_company_id", "audit_log", ["company_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])

    op.create_table(
        "zoho_connection",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("accounts_base_url", sa.String(length=255), nullable=False),
        sa.Column("people_base_url", sa.String(length=255), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", name="uq_zoho_connection_company"),
    )
    op.create_index("ix_zoho_connection_company_id", "zoho_connection", ["company_id"])

    op.create_table(
        "zoho_employee_mapping",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("app_user_id", sa.Uuid(), nullable=False),
        sa.Column("zoho_emp_id", sa.String(length=255), nullable=True),
        sa.Column("erecno", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "app_user_id", name="uq_zoho_mapping_company_user"),
    )
    op.create_index("ix_zoho_employee_mapping_company_id", "zoho_employee_mapping", ["company_id"])
    op.create_index("ix_zoho_employee_mapping_app_user_id", "zoho_employee_mapping", ["app_user_id"])


def downgrade() -> None:
    op.drop_table("zoho_employee_mapping")
    op.drop_table("zoho_connection")
    op.drop_table("audit_log")
    op.drop_table("leave_balance")
    op.drop_table("leave_policy")
    op.drop_table("leave_approval")
    op.drop_table("leave_request")
