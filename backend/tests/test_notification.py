"""Tests for leave event notifications."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from leavebridge.models.audit import AuditLog
from leavebridge.models.enums import NotificationType, UserRole
from leavebridge.models.request import LeaveRequest
from leavebridge.services.employee import EmployeeInfo
from leavebridge.services.notification import (
    NotificationSender,
    dispatch_best_effort,
    notify_leave_event,
    set_notification_sender,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.services.employee import InMemoryEmployeeService
    from leavebridge.services.notification import InMemoryNotificationSender, Notification

COMPANY_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
LONER_ID = uuid.uuid4()
MANAGER_ID = uuid.uuid4()


@pytest.fixture(autouse=True)
def _seed_profiles(employees: InMemoryEmployeeService) -> None:
    for user_id, name, role, manager in [
        (EMPLOYEE_ID, "Emma", UserRole.EMPLOYEE, MANAGER_ID),
        (LONER_ID, "Lars", UserRole.EMPLOYEE, None),
        (MANAGER_ID, "Mark", UserRole.MANAGER, None),
    ]:
        employees.seed(
            EmployeeInfo(
                id=user_id,
                company_id=COMPANY_ID,
                first_name=name,
                last_name="Tester",
                email=f"{name.lower()}@example.com",
                role=role,
                manager_id=manager,
            )
        )


async def _request(session: AsyncSession, user_id: uuid.UUID = EMPLOYEE_ID) -> LeaveRequest:
    leave_request = LeaveRequest(
        company_id=COMPANY_ID,
        user_id=user_id,
        leave_type="annual",
        start_date=date(2026, 3, 2),
        end_date=date(2026, 3, 3),
        total_days=2,
        reason="Wedding",
    )
    session.add(leave_request)
    await session.commit()
    return leave_request


class _FailingSender:
    async def send(self, notification: Notification) -> None:
        raise RuntimeError("mail server down")


def test_failing_sender_satisfies_protocol() -> None:
    assert isinstance(_FailingSender(), NotificationSender)


async def test_submission_goes_to_manager(
    db_session: AsyncSession, notifications: InMemoryNotificationSender
) -> None:
    leave_request = await _request(db_session)

    sent = await notify_leave_event(db_session, leave_request, NotificationType.SUBMITTED)

    assert sent is not None
    assert sent.recipient == "mark@example.com"
    assert sent.subject == "New leave request from Emma Tester"
    assert "Reason: Wedding" in sent.body
    assert notifications.sent == [sent]

    entry = (await db_session.execute(select(AuditLog))).scalar_one()
    assert entry.action == "NOTIFY"
    assert entry.actor_id is None
    assert entry.after_json == {"recipient": "mark@example.com", "type": "submitted"}


async def test_submission_without_manager_sends_nothing(
    db_session: AsyncSession, notifications: InMemoryNotificationSender
) -> None:
    leave_request = await _request(db_session, LONER_ID)

    assert await notify_leave_event(db_session, leave_request, NotificationType.SUBMITTED) is None
    assert notifications.sent == []


async def test_decision_goes_to_requester_with_comments(db_session: AsyncSession) -> None:
    leave_request = await _request(db_session)

    sent = await notify_leave_event(db_session, leave_request, NotificationType.REJECTED, "Team offsite")

    assert sent is not None
    assert sent.recipient == "emma@example.com"
    assert "Comments: Team offsite" in sent.body
    assert "Reason:" not in sent.body


async def test_unknown_requester_is_skipped(db_session: AsyncSession) -> None:
    leave_request = await _request(db_session, uuid.uuid4())
    assert await notify_leave_event(db_session, leave_request, NotificationType.APPROVED) is None


async def test_dispatch_best_effort_swallows_sender_failure(
    db_session: AsyncSession, caplog: pytest.LogCaptureFixture
) -> None:
    leave_request = await _request(db_session)
    set_notification_sender(_FailingSender())

    await dispatch_best_effort(db_session, leave_request, NotificationType.SUBMITTED)

    assert "Failed to send submitted notification" in caplog.text
    assert (await db_session.execute(select(AuditLog))).scalars().all() == []


async def test_dispatch_best_effort_survives_failed_rollback(
    db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    leave_request = await _request(db_session)
    set_notification_sender(_FailingSender())

    async def _broken_rollback() -> None:
        raise OperationalError("ROLLBACK", {}, ConnectionError("connection lost"))

    monkeypatch.setattr(db_session, "rollback", _broken_rollback)

    await dispatch_best_effort(db_session, leave_request, NotificationType.APPROVED)

    assert "Failed to send approved notification" in caplog.text
    assert "Rollback after failed notification" in caplog.text
