# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavebridge.models.base import TimestampMixin, UTCDateTime, UUIDBase, now_utc
from leavebridge.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """An employee's leave request with approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_company_status", "company_id", "status"),
        sa.Index("ix_leave_request_user_dates", "user_id", "start_date", "end_date"),
    )

    company_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=50)
    start_date: date
    end_date: date
    total_days: float
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    reason: str | None = None
    comments: str | None = None
    attachment_url: str | None = Field(default=None, max_length=2048)


class LeaveApproval(UUIDBase, table=True):
    """Immutable record of a decision taken on a leave request."""

    __tablename__ = "leave_approval"

    leave_request_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_request.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    approver_id: uuid.UUID
    status: str = Field(max_length=50)
    comments: str | None = None
    approved_at: datetime = Field(
        default_factory=now_utc,
        sa_type=UTCDateTime,  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
