"""Read and write Zoho People leave, attendance and holiday data."""

# ruff: noqa: TC003
from __future__ import annotations

import json
import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from leavebridge.exceptions import ForbiddenError
from leavebridge.models.enums import UserRole
from leavebridge.schemas.zoho import (
    AttendanceList,
    HolidayList,
    LeaveApplicationResponse,
    LeaveRecordList,
    ZohoAttendanceEntry,
    ZohoHoliday,
    ZohoLeaveRecord,
)
from leavebridge.services.connection import get_connection_or_404
from leavebridge.services.identity import ATTENDANCE_PARAMS, FORM_PARAMS, resolve_remote_identity
from leavebridge.services.zoho_client import call_zoho, require_ok

if TYPE_CHECKING:
    import httpx
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.schemas.auth import AuthContext
    from leavebridge.schemas.zoho import LeaveApplicationPayload

logger = logging.getLogger(__name__)

LEAVE_RECORDS_PATH = "/api/v2/leavetracker/leaves/records"
ATTENDANCE_PATH = "/people/api/attendance/getAttendanceEntries"
HOLIDAYS_PATH = "/people/api/leave/v2/holidays/get"
FORM_INSERT_PATH = "/api/forms/json/{form}/insertRecord"

RecordT = TypeVar("RecordT", bound=BaseModel)


def format_zoho_date(value: date) -> str:
    """Render a date as ``dd-MMM-yyyy`` (e.g. ``05-Mar-2025``)."""
    return value.strftime("%d-%b-%Y")


def _raw_records(data: Any) -> list[Any]:
    """Locate the record list in one of the envelope shapes Zoho uses."""
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []
    if isinstance(data.get("data"), list):
        return data["data"]
    response = data.get("response")
    if isinstance(response, dict) and isinstance(response.get("result"), list):
        return response["result"]
    return []


def extract_records(data: Any, model: type[RecordT]) -> tuple[list[RecordT], int]:
    """Validate each raw record against ``model``. Returns (records, skipped)."""
    items: list[RecordT] = []
    skipped = 0
    for raw in _raw_records(data):
        try:
            items.append(model.model_validate(raw))
        except ValidationError as exc:
            skipped += 1
            logger.warning("Skipping malformed Zoho %s record: %s", model.__name__, exc.errors()[0]["msg"])
    return items, skipped


def _compact(params: dict[str, str | None]) -> dict[str, str]:
    return {key: value for key, value in params.items() if value}


async def _people_url(session: AsyncSession, company_id: uuid.UUID, path: str) -> str:
    connection = await get_connection_or_404(session, company_id)
    return f"{connection.people_base_url.rstrip('/')}{path}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def list_leave_records(
    session: AsyncSession,
    client: httpx.AsyncClient,
    company_id: uuid.UUID,
    *,
    from_date: date | None = None,
    to_date: date | None = None,
    zoho_user_id: str | None = None,
    email: str | None = None,
    employee_id: str | None = None,
) -> LeaveRecordList:
    url = await _people_url(session, company_id, LEAVE_RECORDS_PATH)
    params = _compact(
        {
            "fromDate": from_date.isoformat() if from_date else None,
            "toDate": to_date.isoformat() if to_date else None,
            "userId": zoho_user_id,
            "email": email,
            "employeeId": employee_id,
        }
    )
    result = await call_zoho(session, client, company_id, "GET", url, params=params)
    items, skipped = extract_records(require_ok(result, "leave records"), ZohoLeaveRecord)
    return LeaveRecordList(items=items, skipped=skipped)


async def get_attendance(
    session: AsyncSession,
    client: httpx.AsyncClient,
    auth: AuthContext,
    *,
    user_id: uuid.UUID | None = None,
    on: date | None = None,
) -> AttendanceList:
    """Fetch one day of attendance for a mapped user (the caller by default).

    Employees may only read their own attendance.
    """
    target = user_id or auth.user_id
    if target != auth.user_id and auth.role == UserRole.EMPLOYEE:
        raise ForbiddenError("Cannot view attendance of another employee")
    identity = await resolve_remote_identity(session, auth.company_id, target)
    url = await _people_url(session, auth.company_id, ATTENDANCE_PATH)
    params = {"date": format_zoho_date(on or date.today()), **identity.as_params(ATTENDANCE_PARAMS)}

    result = await call_zoho(session, client, auth.company_id, "GET", url, params=params)
    items, skipped = extract_records(require_ok(result, "attendance"), ZohoAttendanceEntry)
    return AttendanceList(items=items, skipped=skipped)


async def list_holidays(
    session: AsyncSession,
    client: httpx.AsyncClient,
    company_id: uuid.UUID,
    *,
    location: str | None = None,
    shift: str | None = None,
    employee: str | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> HolidayList:
    url = await _people_url(session, company_id, HOLIDAYS_PATH)
    params = _compact(
        {
            "location": location,
            "shift": shift,
            "employee": employee,
            "from": format_zoho_date(from_date) if from_date else None,
            "to": format_zoho_date(to_date) if to_date else None,
        }
    )
    result = await call_zoho(session, client, company_id, "GET", url, params=params)
    items, skipped = extract_records(require_ok(result, "holidays"), ZohoHoliday)
    return HolidayList(items=items, skipped=skipped)


async def create_leave_application(
    session: AsyncSession,
    client: httpx.AsyncClient,
    auth: AuthContext,
    payload: LeaveApplicationPayload,
) -> LeaveApplicationResponse:
    """Insert a leave application record into Zoho on behalf of the caller."""
    identity = await resolve_remote_identity(session, auth.company_id, auth.user_id)
    url = await _people_url(session, auth.company_id, FORM_INSERT_PATH.format(form=payload.form_link_name))

    input_data: dict[str, Any] = {
        **payload.extra_fields,
        **identity.as_params(FORM_PARAMS),
        "Leavetype": payload.leave_type,
        "From": format_zoho_date(payload.from_date),
        "To": format_zoho_date(payload.to_date),
    }
    if payload.reason:
        input_data["Reasonforleave"] = payload.reason

    result = await call_zoho(
        session, client, auth.company_id, "POST", url, data={"inputData": json.dumps(input_data)}
    )
    body = require_ok(result, "leave application")
    logger.info("Created Zoho leave application for user=%s company=%s", auth.user_id, auth.company_id)
    return LeaveApplicationResponse(result=body)
