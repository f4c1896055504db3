# ruff: noqa: TC003
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import select
from sqlmodel import col

from leavebridge.exceptions import NotFoundError
from leavebridge.models.zoho import EmployeeMapping

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

IdentityKind = Literal["zoho_emp_id", "erecno", "email"]

# Parameter names differ per Zoho endpoint.
ATTENDANCE_PARAMS: dict[IdentityKind, str] = {"zoho_emp_id": "empId", "erecno": "erecno", "email": "emailId"}
FORM_PARAMS: dict[IdentityKind, str] = {"zoho_emp_id": "employeeId", "erecno": "erecno", "email": "email"}


@dataclass(frozen=True)
class RemoteIdentity:
    """The single identifier used to address a user in Zoho."""

    kind: IdentityKind
    value: str

    def as_params(self, names: dict[IdentityKind, str]) -> dict[str, str]:
        return {names[self.kind]: self.value}


def identity_from_mapping(mapping: EmployeeMapping) -> RemoteIdentity:
    """Pick the strongest identifier: employee id, then record number, then email."""
    if mapping.zoho_emp_id:
        return RemoteIdentity("zoho_emp_id", mapping.zoho_emp_id)
    if mapping.erecno:
        return RemoteIdentity("erecno", mapping.erecno)
    return RemoteIdentity("email", mapping.email)


async def get_mapping(session: AsyncSession, company_id: uuid.UUID, user_id: uuid.UUID) -> EmployeeMapping | None:
    result = await session.execute(
        select(EmployeeMapping).where(
            col(EmployeeMapping.company_id) == company_id,
            col(EmployeeMapping.app_user_id) == user_id,
        )
    )
    return result.scalar_one_or_none()


async def resolve_remote_identity(session: AsyncSession, company_id: uuid.UUID, user_id: uuid.UUID) -> RemoteIdentity:
    """Resolve a local user to their Zoho identifier. Raises 404 if the user is not mapped."""
    mapping = await get_mapping(session, company_id, user_id)
    if mapping is None:
        raise NotFoundError("Employee not mapped to Zoho")
    return identity_from_mapping(mapping)
