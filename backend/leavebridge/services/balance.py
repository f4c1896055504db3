# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leavebridge.exceptions import ForbiddenError
from leavebridge.models.balance import LeaveBalance
from leavebridge.models.base import now_utc
from leavebridge.models.enums import AuditAction, AuditEntityType, LeaveStatus, LeaveType
from leavebridge.models.request import LeaveRequest
from leavebridge.schemas.balance import BalanceListResponse, BalanceResponse
from leavebridge.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.schemas.auth import AuthContext
    from leavebridge.schemas.balance import SetBalancePayload


def _build_balance_response(balance: LeaveBalance, pending_days: float) -> BalanceResponse:
    return BalanceResponse(
        id=balance.id,
        user_id=balance.user_id,
        leave_type=LeaveType(balance.leave_type),
        year=balance.year,
        total_days=balance.total_days,
        used_days=balance.used_days,
        available_days=balance.available_days,
        pending_days=pending_days,
        updated_at=balance.updated_at,
    )


async def _pending_days_by_type(
    session: AsyncSession,
    company_id: uuid.UUID,
    user_id: uuid.UUID,
    year: int,
) -> dict[str, float]:
    """Working days of the user's pending requests starting in ``year``, per leave type."""
    result = await session.execute(
        select(col(LeaveRequest.leave_type), func.sum(col(LeaveRequest.total_days)))
        .where(
            col(LeaveRequest.company_id) == company_id,
            col(LeaveRequest.user_id) == user_id,
            col(LeaveRequest.status) == LeaveStatus.PENDING.value,
            col(LeaveRequest.start_date) >= date(year, 1, 1),
            col(LeaveRequest.start_date) <= date(year, 12, 31),
        )
        .group_by(col(LeaveRequest.leave_type))
    )
    return {leave_type: float(days or 0) for leave_type, days in result.all()}


async def list_balances(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID | None = None,
    year: int | None = None,
) -> BalanceListResponse:
    """List a user's balances for a year. Only admins may look at someone else's."""
    target = user_id or auth.user_id
    if target != auth.user_id and not auth.is_admin:
        raise ForbiddenError("Not authorized to view this user's balances")
    year = year or date.today().year

    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.company_id) == auth.company_id,
            col(LeaveBalance.user_id) == target,
            col(LeaveBalance.year) == year,
        )
        .order_by(col(LeaveBalance.leave_type))
    )
    pending = await _pending_days_by_type(session, auth.company_id, target, year)
    return BalanceListResponse(
        user_id=target,
        year=year,
        items=[_build_balance_response(b, pending.get(b.leave_type, 0)) for b in result.scalars().all()],
    )


async def set_balance(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID,
    payload: SetBalancePayload,
) -> BalanceResponse:
    """Create or replace a user's entitlement for one leave type and year."""
    result = await session.execute(
        select(LeaveBalance).where(
            col(LeaveBalance.company_id) == auth.company_id,
            col(LeaveBalance.user_id) == user_id,
            col(LeaveBalance.leave_type) == payload.leave_type.value,
            col(LeaveBalance.year) == payload.year,
        )
    )
    balance = result.scalar_one_or_none()
    before = model_to_audit_dict(balance) if balance is not None else None

    if balance is None:
        balance = LeaveBalance(
            company_id=auth.company_id,
            user_id=user_id,
            leave_type=payload.leave_type.value,
            year=payload.year,
        )
        session.add(balance)
    balance.total_days = payload.total_days
    balance.used_days = payload.used_days
    balance.available_days = payload.total_days - payload.used_days
    balance.updated_at = now_utc()
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_BALANCE,
        entity_id=balance.id,
        action=AuditAction.CREATE if before is None else AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(balance),
    )
    await session.commit()

    pending = await _pending_days_by_type(session, auth.company_id, user_id, payload.year)
    return _build_balance_response(balance, pending.get(balance.leave_type, 0))
