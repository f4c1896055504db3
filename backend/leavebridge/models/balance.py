# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leavebridge.models.base import TimestampMixin, UUIDBase


class LeaveBalance(UUIDBase, TimestampMixin, table=True):
    """Per-year entitlement and usage of one leave type for one user."""

    __tablename__ = "leave_balance"
    __table_args__ = (
        sa.UniqueConstraint("company_id", "user_id", "leave_type", "year", name="uq_leave_balance_user_type_year"),
    )

    company_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=50)
    year: int
    total_days: float = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used_days: float = Field(default=0, sa_column_kwargs={"server_default": "0"})
    available_days: float = Field(default=0, sa_column_kwargs={"server_default": "0"})
