# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from leavebridge.api.deps import AuthDep, validate_company_scope
from leavebridge.api.integrations import HttpClientDep
from leavebridge.db import SessionDep
from leavebridge.schemas.zoho import (
    AttendanceList,
    HolidayList,
    LeaveApplicationPayload,
    LeaveApplicationResponse,
    LeaveRecordList,
)
from leavebridge.services import sync as sync_service

sync_router = APIRouter(
    prefix="/companies/{company_id}/zoho",
    tags=["zoho-sync"],
    dependencies=[Depends(validate_company_scope)],
)


@sync_router.get("/leaves", response_model=LeaveRecordList)
async def list_leaves(
    session: SessionDep,
    client: HttpClientDep,
    auth: AuthDep,
    from_date: date | None = Query(default=None, alias="fromDate"),
    to_date: date | None = Query(default=None, alias="toDate"),
    zoho_user_id: str | None = Query(default=None, alias="userId"),
    email: str | None = Query(default=None),
    employee_id: str | None = Query(default=None, alias="employeeId"),
) -> LeaveRecordList:
    """Fetch leave records from the Zoho leave tracker."""
    return await sync_service.list_leave_records(
        session,
        client,
        auth.company_id,
        from_date=from_date,
        to_date=to_date,
        zoho_user_id=zoho_user_id,
        email=email,
        employee_id=employee_id,
    )


@sync_router.post("/leaves", response_model=LeaveApplicationResponse, status_code=status.HTTP_201_CREATED)
async def create_leave(
    payload: LeaveApplicationPayload,
    session: SessionDep,
    client: HttpClientDep,
    auth: AuthDep,
) -> LeaveApplicationResponse:
    """Push a leave application for the caller into Zoho."""
    return await sync_service.create_leave_application(session, client, auth, payload)


@sync_router.get("/attendance", response_model=AttendanceList)
async def get_attendance(
    session: SessionDep,
    client: HttpClientDep,
    auth: AuthDep,
    user_id: uuid.UUID | None = Query(default=None),
    on: date | None = Query(default=None, alias="date"),
) -> AttendanceList:
    """Fetch one day of attendance for the caller or, for managers and admins, another user."""
    return await sync_service.get_attendance(session, client, auth, user_id=user_id, on=on)


@sync_router.get("/holidays", response_model=HolidayList)
async def list_holidays(
    session: SessionDep,
    client: HttpClientDep,
    auth: AuthDep,
    location: str | None = Query(default=None),
    shift: str | None = Query(default=None),
    employee: str | None = Query(default=None),
    from_date: date | None = Query(default=None, alias="from"),
    to_date: date | None = Query(default=None, alias="to"),
) -> HolidayList:
    """Fetch the Zoho holiday calendar."""
    return await sync_service.list_holidays(
        session,
        client,
        auth.company_id,
        location=location,
        shift=shift,
        employee=employee,
        from_date=from_date,
        to_date=to_date,
    )
