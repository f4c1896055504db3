# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from leavebridge.api.deps import AdminDep, AuthDep, validate_company_scope
from leavebridge.db import SessionDep
from leavebridge.schemas.balance import BalanceListResponse, BalanceResponse, SetBalancePayload
from leavebridge.services import balance as balance_service

balances_router = APIRouter(
    prefix="/companies/{company_id}/balances",
    tags=["balances"],
    dependencies=[Depends(validate_company_scope)],
)


@balances_router.get("", response_model=BalanceListResponse)
async def list_balances(
    session: SessionDep,
    auth: AuthDep,
    user_id: uuid.UUID | None = Query(default=None),
    year: int | None = Query(default=None, ge=2000, le=2100),
) -> BalanceListResponse:
    """Get the caller's balances, or any user's for admins."""
    return await balance_service.list_balances(session, auth, user_id, year)


@balances_router.put("/{user_id}", response_model=BalanceResponse)
async def set_balance(
    user_id: uuid.UUID,
    payload: SetBalancePayload,
    session: SessionDep,
    auth: AdminDep,
) -> BalanceResponse:
    """Set a user's entitlement for one leave type and year (admin only)."""
    return await balance_service.set_balance(session, auth, user_id, payload)
