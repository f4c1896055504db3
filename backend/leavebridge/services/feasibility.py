# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leavebridge.exceptions import BadRequestError, NotFoundError
from leavebridge.models.balance import LeaveBalance
from leavebridge.models.enums import LeaveStatus, LeaveType
from leavebridge.models.policy import LeavePolicy
from leavebridge.models.request import LeaveRequest
from leavebridge.schemas.request import FeasibilityResult, FeasibilityValidation

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

# Leave types that may start in the past without a warning.
_BACKDATABLE = frozenset({LeaveType.SICK})


def count_working_days(start_date: date, end_date: date) -> int:
    """Count Monday-Friday days in the inclusive range."""
    if end_date < start_date:
        return 0
    full_weeks, remainder = divmod((end_date - start_date).days + 1, 7)
    first = start_date.weekday()
    return full_weeks * 5 + sum(1 for offset in range(remainder) if (first + offset) % 7 < 5)


async def get_balance(
    session: AsyncSession,
    company_id: uuid.UUID,
    user_id: uuid.UUID,
    leave_type: LeaveType,
    year: int,
) -> LeaveBalance:
    result = await session.execute(
        select(LeaveBalance).where(
            col(LeaveBalance.company_id) == company_id,
            col(LeaveBalance.user_id) == user_id,
            col(LeaveBalance.leave_type) == leave_type.value,
            col(LeaveBalance.year) == year,
        )
    )
    balance = result.scalar_one_or_none()
    if balance is None:
        raise NotFoundError("Unable to fetch leave balance")
    return balance


async def get_active_policy(session: AsyncSession, company_id: uuid.UUID, leave_type: LeaveType) -> LeavePolicy:
    result = await session.execute(
        select(LeavePolicy)
        .where(
            col(LeavePolicy.company_id) == company_id,
            col(LeavePolicy.leave_type) == leave_type.value,
            col(LeavePolicy.is_active).is_(True),
        )
        .order_by(col(LeavePolicy.updated_at).desc())
        .limit(1)
    )
    policy = result.scalar_one_or_none()
    if policy is None:
        raise NotFoundError("Unable to fetch leave policy")
    return policy


async def find_overlapping_requests(
    session: AsyncSession,
    company_id: uuid.UUID,
    user_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> list[LeaveRequest]:
    """Pending or approved requests whose range intersects [start_date, end_date]."""
    result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.company_id) == company_id,
            col(LeaveRequest.user_id) == user_id,
            col(LeaveRequest.status).in_([LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value]),
            col(LeaveRequest.start_date) <= end_date,
            col(LeaveRequest.end_date) >= start_date,
        )
    )
    return list(result.scalars().all())


async def evaluate(
    session: AsyncSession,
    company_id: uuid.UUID,
    user_id: uuid.UUID,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    today: date | None = None,
) -> FeasibilityResult:
    """Check a prospective request against balance, policy and existing requests."""
    if end_date < start_date:
        raise BadRequestError("end_date must not be before start_date")
    today = today or date.today()

    working_days = count_working_days(start_date, end_date)
    balance = await get_balance(session, company_id, user_id, leave_type, today.year)
    policy = await get_active_policy(session, company_id, leave_type)
    overlapping = await find_overlapping_requests(session, company_id, user_id, start_date, end_date)

    errors: list[str] = []
    warnings: list[str] = []

    if balance.available_days < working_days:
        errors.append(
            f"Insufficient leave balance. Available: {balance.available_days:g} days, "
            f"Requested: {working_days} days"
        )
    if policy.max_consecutive_days and working_days > policy.max_consecutive_days:
        errors.append(f"Request exceeds maximum consecutive days limit of {policy.max_consecutive_days} days")
    if overlapping:
        errors.append("You have overlapping leave requests for the selected dates")

    if leave_type not in _BACKDATABLE and start_date < today:
        warnings.append("Leave start date is in the past")
    if working_days == 0:
        warnings.append("Selected dates contain only weekends")

    return FeasibilityResult(
        working_days=working_days,
        available_balance=balance.available_days,
        remaining_balance=balance.available_days - working_days,
        requires_approval=policy.requires_approval,
        requires_documentation=policy.requires_documentation,
        validation=FeasibilityValidation(is_valid=not errors, errors=errors, warnings=warnings),
    )
