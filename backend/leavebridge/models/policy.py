# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leavebridge.models.base import TimestampMixin, UUIDBase


class LeavePolicy(UUIDBase, TimestampMixin, table=True):
    """Company rules for one leave type."""

    __tablename__ = "leave_policy"
    __table_args__ = (sa.Index("ix_leave_policy_company_type", "company_id", "leave_type"),)

    company_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=50)
    name: str = Field(max_length=255)
    days_per_year: float = 0
    max_consecutive_days: int | None = None
    carryover_days: float | None = None
    requires_approval: bool = True
    requires_documentation: bool = False
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
