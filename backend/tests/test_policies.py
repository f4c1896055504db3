"""Tests for leave policy administration."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from leavebridge.models.audit import AuditLog
from leavebridge.models.balance import LeaveBalance

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

COMPANY_ID = uuid.uuid4()
ADMIN_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()

POLICIES_URL = f"/companies/{COMPANY_ID}/policies"
ADMIN_HEADERS = {"X-Company-Id": str(COMPANY_ID), "X-User-Id": str(ADMIN_ID), "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-Company-Id": str(COMPANY_ID), "X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}

ANNUAL = {"leave_type": "annual", "name": "Annual leave", "days_per_year": 20, "max_consecutive_days": 10}


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _create(client: AsyncClient, **overrides: Any) -> dict[str, Any]:
    resp = await client.post(POLICIES_URL, json={**ANNUAL, **overrides}, headers=ADMIN_HEADERS)
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# Create / list / get
# ---------------------------------------------------------------------------


async def test_admin_creates_policy(async_client: AsyncClient, db_session: AsyncSession) -> None:
    body = await _create(async_client)

    assert body["leave_type"] == "annual"
    assert body["requires_approval"] is True
    assert body["is_active"] is True
    assert body["carryover_days"] is None

    entry = (
        await db_session.execute(select(AuditLog).where(col(AuditLog.entity_type) == "leave_policy"))
    ).scalar_one()
    assert entry.action == "CREATE"
    assert entry.actor_id == ADMIN_ID


async def test_employee_cannot_create_policy(async_client: AsyncClient) -> None:
    resp = await async_client.post(POLICIES_URL, json=ANNUAL, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_create_rejects_invalid_values(async_client: AsyncClient) -> None:
    resp = await async_client.post(POLICIES_URL, json={**ANNUAL, "days_per_year": -1}, headers=ADMIN_HEADERS)
    assert resp.status_code == 422
    resp = await async_client.post(POLICIES_URL, json={**ANNUAL, "leave_type": "sabbatical"}, headers=ADMIN_HEADERS)
    assert resp.status_code == 422


async def test_employees_see_active_policies(async_client: AsyncClient) -> None:
    await _create(async_client)
    await _create(async_client, leave_type="sick", name="Sick leave", is_active=False)

    active = await async_client.get(POLICIES_URL, headers=EMPLOYEE_HEADERS)
    assert active.status_code == 200
    assert active.json()["total"] == 1
    assert [p["leave_type"] for p in active.json()["items"]] == ["annual"]

    everything = await async_client.get(POLICIES_URL, params={"include_inactive": True}, headers=ADMIN_HEADERS)
    assert everything.json()["total"] == 2


async def test_get_policy(async_client: AsyncClient) -> None:
    created = await _create(async_client)

    resp = await async_client.get(f"{POLICIES_URL}/{created['id']}", headers=EMPLOYEE_HEADERS)
    assert resp.json() == created

    missing = await async_client.get(f"{POLICIES_URL}/{uuid.uuid4()}", headers=EMPLOYEE_HEADERS)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Leave policy not found"


async def test_policies_are_company_scoped(async_client: AsyncClient) -> None:
    await _create(async_client)
    other = uuid.uuid4()
    resp = await async_client.get(
        f"/companies/{other}/policies",
        headers={"X-Company-Id": str(other), "X-User-Id": str(ADMIN_ID), "X-Role": "admin"},
    )
    assert resp.json()["total"] == 0


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


async def test_update_applies_present_fields_only(async_client: AsyncClient, db_session: AsyncSession) -> None:
    created = await _create(async_client)

    resp = await async_client.patch(
        f"{POLICIES_URL}/{created['id']}",
        json={"max_consecutive_days": None, "name": None, "requires_documentation": True},
        headers=ADMIN_HEADERS,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["max_consecutive_days"] is None
    assert body["name"] == "Annual leave"
    assert body["requires_documentation"] is True
    assert body["days_per_year"] == 20

    entry = (await db_session.execute(select(AuditLog).where(col(AuditLog.action) == "UPDATE"))).scalar_one()
    assert entry.before_json is not None
    assert entry.before_json["max_consecutive_days"] == 10


async def test_employee_cannot_update_policy(async_client: AsyncClient) -> None:
    created = await _create(async_client)
    resp = await async_client.patch(
        f"{POLICIES_URL}/{created['id']}", json={"is_active": False}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 403


async def test_deactivated_policy_no_longer_applies(async_client: AsyncClient, db_session: AsyncSession) -> None:
    created = await _create(async_client)
    db_session.add(
        LeaveBalance(
            company_id=COMPANY_ID,
            user_id=EMPLOYEE_ID,
            leave_type="annual",
            year=date.today().year,
            total_days=20,
            available_days=20,
        )
    )
    await db_session.commit()
    start = date.today() + timedelta(days=14)
    feasibility = {"leave_type": "annual", "start_date": start.isoformat(), "end_date": start.isoformat()}

    before = await async_client.post(
        f"/companies/{COMPANY_ID}/requests/feasibility", json=feasibility, headers=EMPLOYEE_HEADERS
    )
    assert before.status_code == 200

    await async_client.patch(f"{POLICIES_URL}/{created['id']}", json={"is_active": False}, headers=ADMIN_HEADERS)

    after = await async_client.post(
        f"/companies/{COMPANY_ID}/requests/feasibility", json=feasibility, headers=EMPLOYEE_HEADERS
    )
    assert after.status_code == 404
    assert after.json()["detail"] == "Unable to fetch leave policy"
