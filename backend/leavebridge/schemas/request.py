# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leavebridge.models.enums import Decision, LeaveStatus, LeaveType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class _DateRange(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class SubmitLeavePayload(_DateRange):
    """Request body for submitting a leave request for the caller."""

    leave_type: LeaveType
    reason: str | None = Field(default=None, max_length=2000)
    attachment_url: str | None = Field(default=None, max_length=2048)


class FeasibilityPayload(_DateRange):
    """Request body for evaluating a prospective leave request."""

    leave_type: LeaveType
    user_id: uuid.UUID | None = None


class DecisionPayload(BaseModel):
    """Request body for approving or rejecting a request."""

    decision: Decision
    comments: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    company_id: uuid.UUID
    user_id: uuid.UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: float
    status: LeaveStatus
    reason: str | None
    comments: str | None
    attachment_url: str | None
    created_at: datetime
    updated_at: datetime


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int


class FeasibilityValidation(BaseModel):
    """Hard errors block submission; warnings do not."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class FeasibilityResult(BaseModel):
    """Outcome of evaluating a prospective request against balance and policy."""

    working_days: int
    available_balance: float
    remaining_balance: float
    requires_approval: bool
    requires_documentation: bool
    validation: FeasibilityValidation
