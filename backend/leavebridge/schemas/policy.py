# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from leavebridge.models.enums import LeaveType


class CreatePolicyPayload(BaseModel):
    """Request body for creating a leave policy."""

    leave_type: LeaveType
    name: str = Field(min_length=1, max_length=255)
    days_per_year: float = Field(default=0, ge=0)
    max_consecutive_days: int | None = Field(default=None, ge=1)
    carryover_days: float | None = Field(default=None, ge=0)
    requires_approval: bool = True
    requires_documentation: bool = False
    is_active: bool = True


class UpdatePolicyPayload(BaseModel):
    """Partial update of a leave policy. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    days_per_year: float | None = Field(default=None, ge=0)
    max_consecutive_days: int | None = Field(default=None, ge=1)
    carryover_days: float | None = Field(default=None, ge=0)
    requires_approval: bool | None = None
    requires_documentation: bool | None = None
    is_active: bool | None = None


class PolicyResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    leave_type: LeaveType
    name: str
    days_per_year: float
    max_consecutive_days: int | None
    carryover_days: float | None
    requires_approval: bool
    requires_documentation: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PolicyListResponse(BaseModel):
    items: list[PolicyResponse]
    total: int
