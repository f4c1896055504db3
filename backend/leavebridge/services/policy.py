# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leavebridge.exceptions import NotFoundError
from leavebridge.models.base import now_utc
from leavebridge.models.enums import AuditAction, AuditEntityType, LeaveType
from leavebridge.models.policy import LeavePolicy
from leavebridge.schemas.policy import PolicyListResponse, PolicyResponse
from leavebridge.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.schemas.auth import AuthContext
    from leavebridge.schemas.policy import CreatePolicyPayload, UpdatePolicyPayload

# Limits that an explicit null removes.
_CLEARABLE = frozenset({"max_consecutive_days", "carryover_days"})


def _build_policy_response(policy: LeavePolicy) -> PolicyResponse:
    return PolicyResponse(
        id=policy.id,
        company_id=policy.company_id,
        leave_type=LeaveType(policy.leave_type),
        name=policy.name,
        days_per_year=policy.days_per_year,
        max_consecutive_days=policy.max_consecutive_days,
        carryover_days=policy.carryover_days,
        requires_approval=policy.requires_approval,
        requires_documentation=policy.requires_documentation,
        is_active=policy.is_active,
        created_at=policy.created_at,
        updated_at=policy.updated_at,
    )


async def _get_policy_or_404(session: AsyncSession, company_id: uuid.UUID, policy_id: uuid.UUID) -> LeavePolicy:
    result = await session.execute(
        select(LeavePolicy).where(
            col(LeavePolicy.id) == policy_id,
            col(LeavePolicy.company_id) == company_id,
        )
    )
    policy = result.scalar_one_or_none()
    if policy is None:
        raise NotFoundError("Leave policy not found")
    return policy


async def list_policies(
    session: AsyncSession,
    company_id: uuid.UUID,
    include_inactive: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> PolicyListResponse:
    """List a company's policies, active ones only unless asked otherwise."""
    filters = [col(LeavePolicy.company_id) == company_id]
    if not include_inactive:
        filters.append(col(LeavePolicy.is_active).is_(True))

    count_result = await session.execute(select(func.count()).select_from(LeavePolicy).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeavePolicy)
        .where(*filters)
        .order_by(col(LeavePolicy.leave_type), col(LeavePolicy.created_at))
        .offset(offset)
        .limit(limit)
    )
    return PolicyListResponse(items=[_build_policy_response(p) for p in result.scalars().all()], total=total)


async def get_policy(session: AsyncSession, company_id: uuid.UUID, policy_id: uuid.UUID) -> PolicyResponse:
    return _build_policy_response(await _get_policy_or_404(session, company_id, policy_id))


async def create_policy(session: AsyncSession, auth: AuthContext, payload: CreatePolicyPayload) -> PolicyResponse:
    """Create a policy. The newest active policy of a leave type is the one feasibility applies."""
    policy = LeavePolicy(company_id=auth.company_id, **payload.model_dump(mode="json"))
    session.add(policy)
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_POLICY,
        entity_id=policy.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(policy),
    )
    await session.commit()
    return _build_policy_response(policy)


async def update_policy(
    session: AsyncSession,
    auth: AuthContext,
    policy_id: uuid.UUID,
    payload: UpdatePolicyPayload,
) -> PolicyResponse:
    """Apply the fields present in the payload, including activation toggles."""
    policy = await _get_policy_or_404(session, auth.company_id, policy_id)
    before = model_to_audit_dict(policy)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field not in _CLEARABLE:
            continue
        setattr(policy, field, value)
    policy.updated_at = now_utc()
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_POLICY,
        entity_id=policy.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(policy),
    )
    await session.commit()
    return _build_policy_response(policy)
