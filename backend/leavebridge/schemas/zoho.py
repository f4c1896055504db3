# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# OAuth
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    """Body returned by ``/oauth/v2/token``.

    ``refresh_token`` is only issued on the authorization_code grant.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str
    expires_in: int = Field(gt=0)
    refresh_token: str | None = None
    api_domain: str | None = None
    token_type: str | None = None


class OAuthState(BaseModel):
    """Claims carried by the signed OAuth ``state`` value."""

    company_id: uuid.UUID
    user_id: uuid.UUID
    nonce: str = Field(min_length=16)


class AuthorizeResponse(BaseModel):
    """Authorization URL the browser must be redirected to."""

    auth_url: str
    state: str


class CallbackParams(BaseModel):
    """Parameters Zoho appends to the redirect URI, or the same fields in a JSON body."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str | None = None
    state: str | None = None
    location: str | None = None
    accounts_server: str | None = Field(default=None, alias="accounts-server")
    error: str | None = None


class CallbackResponse(BaseModel):
    """Result of a successful callback for API (non-browser) callers."""

    success: bool = True
    company_id: uuid.UUID
    created: bool


class ConnectionStatusResponse(BaseModel):
    """Public view of a company's Zoho connection. Never includes tokens."""

    connected: bool
    expired: bool | None = None
    expires_at: datetime | None = None
    people_base_url: str | None = None
    accounts_base_url: str | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Employee mapping
# ---------------------------------------------------------------------------


class MappingPayload(BaseModel):
    """Request body for creating or replacing a user's Zoho mapping."""

    zoho_emp_id: str | None = Field(default=None, max_length=255)
    erecno: str | None = Field(default=None, max_length=255)
    email: str = Field(min_length=3, max_length=320)


class MappingResponse(BaseModel):
    """Response schema for an employee mapping."""

    id: uuid.UUID
    app_user_id: uuid.UUID
    zoho_emp_id: str | None
    erecno: str | None
    email: str
    is_complete: bool
    updated_at: datetime


# ---------------------------------------------------------------------------
# Remote records
# ---------------------------------------------------------------------------


class _ZohoRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class ZohoLeaveRecord(_ZohoRecord):
    """A leave record from the leave tracker API."""

    record_id: str = Field(alias="recordId")
    employee_id: str = Field(alias="employeeId")
    employee_name: str | None = Field(default=None, alias="employeeName")
    leave_type: str = Field(alias="leaveType")
    from_date: str = Field(alias="fromDate")
    to_date: str = Field(alias="toDate")
    duration: float | None = None
    status: str
    reason: str | None = None
    applied_date: str | None = Field(default=None, alias="appliedDate")
    approved_by: str | None = Field(default=None, alias="approvedBy")
    rejected_by: str | None = Field(default=None, alias="rejectedBy")


class ZohoAttendanceEntry(_ZohoRecord):
    """A day of attendance for one employee."""

    employee_id: str = Field(alias="employeeId")
    employee_name: str | None = Field(default=None, alias="employeeName")
    date: str
    check_in: str | None = Field(default=None, alias="checkIn")
    check_out: str | None = Field(default=None, alias="checkOut")
    total_hours: float | None = Field(default=None, alias="totalHours")
    status: str


class ZohoHoliday(_ZohoRecord):
    """A holiday from the holiday calendar API."""

    id: str
    name: str
    date: str
    type: str | None = None
    description: str | None = None


class LeaveRecordList(BaseModel):
    items: list[ZohoLeaveRecord]
    skipped: int = 0


class AttendanceList(BaseModel):
    items: list[ZohoAttendanceEntry]
    skipped: int = 0


class HolidayList(BaseModel):
    items: list[ZohoHoliday]
    skipped: int = 0


class LeaveApplicationPayload(BaseModel):
    """Leave application pushed into a Zoho People form."""

    form_link_name: str = Field(default="LeaveApplication", alias="formLinkName", pattern=r"^[A-Za-z0-9_]+$")
    leave_type: str = Field(alias="leaveType", min_length=1)
    from_date: date = Field(alias="fromDate")
    to_date: date = Field(alias="toDate")
    reason: str | None = None
    extra_fields: dict[str, Any] = Field(default_factory=dict, alias="extraFields")

    model_config = ConfigDict(populate_by_name=True)


class LeaveApplicationResponse(BaseModel):
    """Raw acknowledgement from Zoho for a submitted form record."""

    success: bool = True
    result: Any = None
