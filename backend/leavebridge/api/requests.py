# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from leavebridge.api.deps import AuthDep, validate_company_scope
from leavebridge.db import SessionDep
from leavebridge.models.enums import LeaveStatus
from leavebridge.schemas.request import (
    DecisionPayload,
    FeasibilityPayload,
    FeasibilityResult,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    SubmitLeavePayload,
)
from leavebridge.services import approval as approval_service
from leavebridge.services import request as request_service

requests_router = APIRouter(
    prefix="/companies/{company_id}/requests",
    tags=["requests"],
    dependencies=[Depends(validate_company_scope)],
)


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Submit a leave request for the caller."""
    return await request_service.submit_request(session, auth, payload)


@requests_router.post("/feasibility", response_model=FeasibilityResult)
async def check_feasibility(
    payload: FeasibilityPayload,
    session: SessionDep,
    auth: AuthDep,
) -> FeasibilityResult:
    """Evaluate a prospective request without storing it."""
    return await request_service.check_feasibility(session, auth, payload)


@requests_router.get("", response_model=LeaveRequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    user_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests with optional filters."""
    return await request_service.list_requests(session, auth.company_id, status_filter, user_id, offset, limit)


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    return await request_service.get_request(session, auth.company_id, request_id)


@requests_router.post("/{request_id}/decision", response_model=LeaveRequestResponse)
async def decide_request(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Approve or reject a pending request (admin or the requester's manager)."""
    return await approval_service.decide(
        session, auth.company_id, request_id, auth.user_id, payload.decision, payload.comments
    )


@requests_router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Cancel a pending leave request."""
    return await request_service.cancel_request(session, auth, request_id)
