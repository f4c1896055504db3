from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

from leavebridge.models import (
    AuditLog,
    EmployeeMapping,
    LeaveApproval,
    LeaveBalance,
    LeavePolicy,
    LeaveRequest,
    SQLModel,
    ZohoConnection,
)
from leavebridge.models.base import UTCDateTime
from leavebridge.models.enums import LeaveStatus

EXPECTED_TABLES = {
    "audit_log",
    "leave_approval",
    "leave_balance",
    "leave_policy",
    "leave_request",
    "zoho_connection",
    "zoho_employee_mapping",
}


def test_all_tables_registered() -> None:
    assert set(SQLModel.metadata.tables.keys()) == EXPECTED_TABLES


def test_leave_request_defaults_to_pending() -> None:
    request = LeaveRequest(
        company_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        leave_type="annual",
        start_date=date(2026, 3, 2),
        end_date=date(2026, 3, 6),
        total_days=5,
    )
    assert request.status == LeaveStatus.PENDING
    assert request.id is not None
    assert request.created_at.tzinfo is not None


def test_leave_approval_instantiation() -> None:
    approval = LeaveApproval(leave_request_id=uuid.uuid4(), approver_id=uuid.uuid4(), status="approved")
    assert approval.approved_at is not None
    assert approval.comments is None


def test_policy_defaults() -> None:
    policy = LeavePolicy(company_id=uuid.uuid4(), leave_type="sick", name="Sick leave")
    assert policy.requires_approval is True
    assert policy.requires_documentation is False
    assert policy.is_active is True
    assert policy.max_consecutive_days is None


def test_balance_defaults() -> None:
    balance = LeaveBalance(company_id=uuid.uuid4(), user_id=uuid.uuid4(), leave_type="annual", year=2026)
    assert balance.available_days == 0


def test_audit_log_actor_is_optional() -> None:
    entry = AuditLog(company_id=uuid.uuid4(), entity_type="leave_request", entity_id=uuid.uuid4(), action="NOTIFY")
    assert entry.actor_id is None


def test_connection_expiry_boundary() -> None:
    expires_at = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
    connection = ZohoConnection(
        company_id=uuid.uuid4(),
        accounts_base_url="https://accounts.zoho.com",
        people_base_url="https://people.zoho.com",
        access_token="a",
        refresh_token="r",
        expires_at=expires_at,
    )
    assert not connection.is_expired(expires_at - timedelta(seconds=1))
    assert connection.is_expired(expires_at)


def test_mapping_unique_per_company_user() -> None:
    table = EmployeeMapping.__table__  # type: ignore[attr-defined]
    unique_columns = {
        tuple(c.name for c in constraint.columns)
        for constraint in table.constraints
        if constraint.__class__.__name__ == "UniqueConstraint"
    }
    assert ("company_id", "app_user_id") in unique_columns


def test_utc_datetime_tags_naive_values() -> None:
    column_type = UTCDateTime()
    naive = datetime(2026, 3, 1, 12, 0)
    assert column_type.process_result_value(naive, None) == naive.replace(tzinfo=UTC)
    assert column_type.process_bind_param(naive, None) == naive.replace(tzinfo=UTC)
    assert column_type.process_result_value(None, None) is None
