# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leavebridge.exceptions import BadRequestError, ForbiddenError, InvalidTransitionError, NotFoundError
from leavebridge.models.base import now_utc
from leavebridge.models.enums import AuditAction, AuditEntityType, LeaveStatus, LeaveType, NotificationType
from leavebridge.models.request import LeaveRequest
from leavebridge.schemas.request import LeaveRequestListResponse, LeaveRequestResponse
from leavebridge.services import feasibility
from leavebridge.services.audit import model_to_audit_dict, write_audit_log
from leavebridge.services.notification import dispatch_best_effort

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.schemas.auth import AuthContext
    from leavebridge.schemas.request import FeasibilityPayload, FeasibilityResult, SubmitLeavePayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        company_id=request.company_id,
        user_id=request.user_id,
        leave_type=LeaveType(request.leave_type),
        start_date=request.start_date,
        end_date=request.end_date,
        total_days=request.total_days,
        status=LeaveStatus(request.status),
        reason=request.reason,
        comments=request.comments,
        attachment_url=request.attachment_url,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


async def get_request_or_404(
    session: AsyncSession,
    company_id: uuid.UUID,
    request_id: uuid.UUID,
) -> LeaveRequest:
    """Fetch a request by ID scoped to company. Raises 404 if not found."""
    result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.id) == request_id,
            col(LeaveRequest.company_id) == company_id,
        )
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Leave request not found")
    return request


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def check_feasibility(
    session: AsyncSession,
    auth: AuthContext,
    payload: FeasibilityPayload,
) -> FeasibilityResult:
    """Evaluate a prospective request for the caller, or for another user when admin."""
    user_id = payload.user_id or auth.user_id
    if user_id != auth.user_id and not auth.is_admin:
        raise ForbiddenError("Cannot evaluate leave for another employee")
    return await feasibility.evaluate(
        session, auth.company_id, user_id, payload.leave_type, payload.start_date, payload.end_date
    )


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitLeavePayload,
) -> LeaveRequestResponse:
    """Submit a leave request for the caller.

    1. Evaluate feasibility; any hard error rejects the submission.
    2. Create the request (pending) sized in working days.
    3. Write audit log and commit.
    4. Notify the manager; failures are logged only.
    """
    result = await feasibility.evaluate(
        session, auth.company_id, auth.user_id, payload.leave_type, payload.start_date, payload.end_date
    )
    if not result.validation.is_valid:
        raise BadRequestError("; ".join(result.validation.errors))

    leave_request = LeaveRequest(
        company_id=auth.company_id,
        user_id=auth.user_id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        total_days=float(result.working_days),
        status=LeaveStatus.PENDING.value,
        reason=payload.reason,
        attachment_url=payload.attachment_url,
    )
    session.add(leave_request)
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(leave_request),
    )
    await session.commit()
    logger.info("Leave request %s submitted by %s", leave_request.id, auth.user_id)

    response = build_request_response(leave_request)
    await dispatch_best_effort(session, leave_request, NotificationType.SUBMITTED)
    return response


async def cancel_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Cancel a pending request. The requester or an admin can cancel."""
    leave_request = await get_request_or_404(session, auth.company_id, request_id)

    if auth.user_id != leave_request.user_id and not auth.is_admin:
        raise ForbiddenError("Not authorized to cancel this request")
    if leave_request.status != LeaveStatus.PENDING.value:
        raise InvalidTransitionError("Only pending requests can be cancelled")

    before = model_to_audit_dict(leave_request)
    leave_request.status = LeaveStatus.CANCELLED.value
    leave_request.updated_at = now_utc()
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.CANCEL,
        before_json=before,
        after_json=model_to_audit_dict(leave_request),
    )
    await session.commit()

    response = build_request_response(leave_request)
    await dispatch_best_effort(session, leave_request, NotificationType.CANCELLED)
    return response


async def get_request(
    session: AsyncSession,
    company_id: uuid.UUID,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single request by ID."""
    leave_request = await get_request_or_404(session, company_id, request_id)
    return build_request_response(leave_request)


async def list_requests(
    session: AsyncSession,
    company_id: uuid.UUID,
    status_filter: LeaveStatus | None = None,
    user_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List requests with optional filters, ordered by created_at DESC."""
    base_filters = [col(LeaveRequest.company_id) == company_id]

    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)
    if user_id is not None:
        base_filters.append(col(LeaveRequest.user_id) == user_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return LeaveRequestListResponse(
        items=[build_request_response(r) for r in result.scalars().all()],
        total=total,
    )
