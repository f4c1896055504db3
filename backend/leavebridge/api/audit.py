# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from leavebridge.api.deps import AdminDep, validate_company_scope
from leavebridge.db import SessionDep
from leavebridge.models.enums import AuditAction, AuditEntityType
from leavebridge.schemas.audit import AuditLogListResponse
from leavebridge.services import audit as audit_service

audit_router = APIRouter(
    prefix="/companies/{company_id}/audit-logs",
    tags=["audit"],
    dependencies=[Depends(validate_company_scope)],
)


@audit_router.get("", response_model=AuditLogListResponse)
async def query_audit_log(
    session: SessionDep,
    auth: AdminDep,
    entity_type: AuditEntityType | None = Query(default=None),
    action: AuditAction | None = Query(default=None),
    actor_id: uuid.UUID | None = Query(default=None),
    entity_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditLogListResponse:
    """Query audit log entries with optional filters (admin only)."""
    return await audit_service.query_audit_log(
        session,
        auth.company_id,
        entity_type=entity_type,
        action=action,
        actor_id=actor_id,
        entity_id=entity_id,
        offset=offset,
        limit=limit,
    )
