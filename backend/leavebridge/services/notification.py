# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel

from leavebridge.models.enums import AuditAction, AuditEntityType, NotificationType
from leavebridge.services.audit import write_audit_log
from leavebridge.services.employee import get_employee_service

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.models.request import LeaveRequest

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """A message about a leave event addressed to one person."""

    recipient: str
    subject: str
    body: str
    type: NotificationType
    leave_request_id: uuid.UUID


@runtime_checkable
class NotificationSender(Protocol):
    """Interface for the delivery channel (e-mail provider in production)."""

    async def send(self, notification: Notification) -> None: ...


class InMemoryNotificationSender:
    """Development sender that keeps messages in memory and logs them."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    async def send(self, notification: Notification) -> None:
        self.sent.append(notification)
        logger.info("Notification to %s: %s", notification.recipient, notification.subject)


_sender: NotificationSender = InMemoryNotificationSender()


def get_notification_sender() -> NotificationSender:
    return _sender


def set_notification_sender(sender: NotificationSender) -> None:
    """Override the sender (for testing or production wiring)."""
    global _sender
    _sender = sender


_SUBJECTS = {
    NotificationType.SUBMITTED: "New leave request from {employee}",
    NotificationType.APPROVED: "Leave request approved",
    NotificationType.REJECTED: "Leave request rejected",
    NotificationType.CANCELLED: "Leave request cancelled by {employee}",
}


def _body(request: LeaveRequest, event: NotificationType, employee: str, comments: str | None) -> str:
    lines = [
        f"{employee}'s {request.leave_type} leave request is {event.value}.",
        f"Dates: {request.start_date.isoformat()} to {request.end_date.isoformat()} ({request.total_days:g} days)",
    ]
    if request.reason and event == NotificationType.SUBMITTED:
        lines.append(f"Reason: {request.reason}")
    if comments:
        lines.append(f"Comments: {comments}")
    return "\n".join(lines)


async def notify_leave_event(
    session: AsyncSession,
    request: LeaveRequest,
    event: NotificationType,
    comments: str | None = None,
) -> Notification | None:
    """Send a notification for a leave event and audit it.

    Submissions and cancellations go to the requester's manager, decisions to
    the requester. Returns None when there is nobody to notify.
    """
    employees = get_employee_service()
    requester = await employees.get_employee(request.company_id, request.user_id)
    if requester is None:
        logger.warning("No profile for user=%s; skipping %s notification", request.user_id, event)
        return None

    if event in (NotificationType.SUBMITTED, NotificationType.CANCELLED):
        manager = None
        if requester.manager_id is not None:
            manager = await employees.get_employee(request.company_id, requester.manager_id)
        if manager is None:
            return None
        recipient = manager.email
    else:
        recipient = requester.email

    notification = Notification(
        recipient=recipient,
        subject=_SUBJECTS[event].format(employee=requester.full_name),
        body=_body(request, event, requester.full_name, comments),
        type=event,
        leave_request_id=request.id,
    )
    await get_notification_sender().send(notification)

    await write_audit_log(
        session,
        company_id=request.company_id,
        actor_id=None,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=request.id,
        action=AuditAction.NOTIFY,
        after_json={"recipient": recipient, "type": event.value},
    )
    await session.commit()
    return notification


async def dispatch_best_effort(
    session: AsyncSession,
    request: LeaveRequest,
    event: NotificationType,
    comments: str | None = None,
) -> None:
    """Run notify_leave_event, logging and discarding any failure."""
    request_id = request.id
    try:
        await notify_leave_event(session, request, event, comments)
    except Exception:
        logger.exception("Failed to send %s notification for leave request %s", event.value, request_id)
        try:
            await session.rollback()
        except Exception:
            logger.exception("Rollback after failed notification for leave request %s failed", request_id)
