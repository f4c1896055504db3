# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from leavebridge.api.deps import AdminDep, AuthDep, validate_company_scope
from leavebridge.db import SessionDep
from leavebridge.schemas.policy import (
    CreatePolicyPayload,
    PolicyListResponse,
    PolicyResponse,
    UpdatePolicyPayload,
)
from leavebridge.services import policy as policy_service

policies_router = APIRouter(
    prefix="/companies/{company_id}/policies",
    tags=["policies"],
    dependencies=[Depends(validate_company_scope)],
)


@policies_router.get("", response_model=PolicyListResponse)
async def list_policies(
    session: SessionDep,
    auth: AuthDep,
    include_inactive: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> PolicyListResponse:
    """List the company's leave policies (active only by default)."""
    return await policy_service.list_policies(session, auth.company_id, include_inactive, offset, limit)


@policies_router.post("", response_model=PolicyResponse, status_code=status.HTTP_201_CREATED)
async def create_policy(
    payload: CreatePolicyPayload,
    session: SessionDep,
    auth: AdminDep,
) -> PolicyResponse:
    """Create a leave policy (admin only)."""
    return await policy_service.create_policy(session, auth, payload)


@policies_router.get("/{policy_id}", response_model=PolicyResponse)
async def get_policy(
    policy_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> PolicyResponse:
    return await policy_service.get_policy(session, auth.company_id, policy_id)


@policies_router.patch("/{policy_id}", response_model=PolicyResponse)
async def update_policy(
    policy_id: uuid.UUID,
    payload: UpdatePolicyPayload,
    session: SessionDep,
    auth: AdminDep,
) -> PolicyResponse:
    """Update or deactivate a leave policy (admin only)."""
    return await policy_service.update_policy(session, auth, policy_id, payload)
