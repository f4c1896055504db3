# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leavebridge.models.enums import LeaveType


class BalanceResponse(BaseModel):
    """Entitlement for one leave type and year, with days still awaiting approval."""

    id: uuid.UUID
    user_id: uuid.UUID
    leave_type: LeaveType
    year: int
    total_days: float
    used_days: float
    available_days: float
    pending_days: float
    updated_at: datetime


class BalanceListResponse(BaseModel):
    user_id: uuid.UUID
    year: int
    items: list[BalanceResponse]


class SetBalancePayload(BaseModel):
    """Admin request body for setting a user's entitlement for one leave type and year."""

    leave_type: LeaveType
    year: int = Field(ge=2000, le=2100)
    total_days: float = Field(ge=0)
    used_days: float = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _validate_usage(self) -> Self:
        if self.used_days > self.total_days:
            msg = "used_days must not exceed total_days"
            raise ValueError(msg)
        return self
