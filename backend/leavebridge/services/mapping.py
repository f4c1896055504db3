# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leavebridge.exceptions import NotFoundError
from leavebridge.models.base import now_utc
from leavebridge.models.enums import AuditAction, AuditEntityType
from leavebridge.models.zoho import EmployeeMapping
from leavebridge.schemas.zoho import MappingResponse
from leavebridge.services.audit import model_to_audit_dict, write_audit_log
from leavebridge.services.identity import get_mapping

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.schemas.auth import AuthContext
    from leavebridge.schemas.zoho import MappingPayload


def _build_mapping_response(mapping: EmployeeMapping) -> MappingResponse:
    return MappingResponse(
        id=mapping.id,
        app_user_id=mapping.app_user_id,
        zoho_emp_id=mapping.zoho_emp_id,
        erecno=mapping.erecno,
        email=mapping.email,
        is_complete=mapping.is_complete,
        updated_at=mapping.updated_at,
    )


async def list_mappings(session: AsyncSession, company_id: uuid.UUID) -> list[MappingResponse]:
    result = await session.execute(
        select(EmployeeMapping)
        .where(col(EmployeeMapping.company_id) == company_id)
        .order_by(col(EmployeeMapping.email))
    )
    return [_build_mapping_response(m) for m in result.scalars().all()]


async def upsert_mapping(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID,
    payload: MappingPayload,
) -> MappingResponse:
    """Create or replace the Zoho identifiers for a local user."""
    mapping = await get_mapping(session, auth.company_id, user_id)
    before = model_to_audit_dict(mapping) if mapping is not None else None

    if mapping is None:
        mapping = EmployeeMapping(company_id=auth.company_id, app_user_id=user_id, email=payload.email)
        session.add(mapping)
    mapping.zoho_emp_id = payload.zoho_emp_id or None
    mapping.erecno = payload.erecno or None
    mapping.email = payload.email
    mapping.updated_at = now_utc()
    await session.flush()

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE_MAPPING,
        entity_id=mapping.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(mapping),
    )
    await session.commit()
    return _build_mapping_response(mapping)


async def delete_mapping(session: AsyncSession, auth: AuthContext, user_id: uuid.UUID) -> None:
    """Unmap a user. Raises 404 if no mapping exists."""
    mapping = await get_mapping(session, auth.company_id, user_id)
    if mapping is None:
        raise NotFoundError("Employee not mapped to Zoho")

    await write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE_MAPPING,
        entity_id=mapping.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(mapping),
    )
    await session.delete(mapping)
    await session.commit()
