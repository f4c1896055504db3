# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from leavebridge.exceptions import ForbiddenError, InvalidTransitionError, NotFoundError
from leavebridge.models.base import now_utc
from leavebridge.models.enums import AuditAction, AuditEntityType, Decision, LeaveStatus, NotificationType
from leavebridge.models.request import LeaveApproval
from leavebridge.services.audit import model_to_audit_dict, write_audit_log
from leavebridge.services.employee import get_employee_service
from leavebridge.services.notification import dispatch_best_effort
from leavebridge.services.request import build_request_response, get_request_or_404

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.schemas.request import LeaveRequestResponse
    from leavebridge.services.employee import EmployeeInfo

logger = logging.getLogger(__name__)

_AUDIT_ACTIONS = {Decision.APPROVED: AuditAction.APPROVE, Decision.REJECTED: AuditAction.REJECT}


def can_decide(approver: EmployeeInfo, requester: EmployeeInfo) -> bool:
    """Admins decide any request; otherwise only the requester's manager of record."""
    if approver.is_admin:
        return True
    return requester.manager_id is not None and requester.manager_id == approver.id


async def decide(
    session: AsyncSession,
    company_id: uuid.UUID,
    leave_request_id: uuid.UUID,
    approver_id: uuid.UUID,
    decision: Decision,
    comments: str | None = None,
) -> LeaveRequestResponse:
    """Approve or reject a pending leave request.

    1. Resolve the approver's profile (404).
    2. Resolve the request and the requester's profile (404).
    3. Require status pending (400).
    4. Require admin or manager of record (403).
    5. Set status and comments.
    6. Append the approval record.
    7. Append the audit entry.
       Steps 5-7 are committed together.
    8. Notify the requester; failures are logged only.
    """
    employees = get_employee_service()

    approver = await employees.get_employee(company_id, approver_id)
    if approver is None:
        raise NotFoundError("Approver not found")

    leave_request = await get_request_or_404(session, company_id, leave_request_id)
    requester = await employees.get_employee(company_id, leave_request.user_id)
    if requester is None:
        raise NotFoundError("Requester profile not found")

    if leave_request.status != LeaveStatus.PENDING.value:
        raise InvalidTransitionError("Leave request is no longer pending approval")

    if not can_decide(approver, requester):
        raise ForbiddenError("Insufficient permissions to approve this request")

    before = model_to_audit_dict(leave_request)
    now = now_utc()

    leave_request.status = decision.value
    leave_request.comments = comments
    leave_request.updated_at = now

    session.add(
        LeaveApproval(
            leave_request_id=leave_request.id,
            approver_id=approver.id,
            status=decision.value,
            comments=comments,
            approved_at=now,
        )
    )
    await session.flush()

    await write_audit_log(
        session,
        company_id=company_id,
        actor_id=approver.id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=_AUDIT_ACTIONS[decision],
        before_json=before,
        after_json=model_to_audit_dict(leave_request),
    )
    await session.commit()
    logger.info("Leave request %s %s by %s", leave_request.id, decision.value, approver.id)

    response = build_request_response(leave_request)
    await dispatch_best_effort(session, leave_request, NotificationType(decision.value), comments)
    return response
