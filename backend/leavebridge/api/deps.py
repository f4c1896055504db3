# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, Path
from pydantic import ValidationError

from leavebridge.exceptions import AuthenticationError, ForbiddenError
from leavebridge.schemas.auth import AuthContext


async def get_auth_context(
    x_company_id: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
    x_role: str = Header(default="employee"),
) -> AuthContext:
    """Extract dev auth context from request headers. Missing or malformed identity is a 401."""
    if not x_company_id or not x_user_id:
        raise AuthenticationError()
    try:
        return AuthContext(company_id=x_company_id, user_id=x_user_id, role=x_role)
    except ValidationError as exc:
        raise AuthenticationError("Invalid identity headers") from exc


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if not auth.is_admin:
        raise ForbiddenError("Admin access required")
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]


async def validate_company_scope(
    company_id: uuid.UUID = Path(),
    auth: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Ensure the path company_id matches the auth header company_id."""
    if company_id != auth.company_id:
        raise ForbiddenError("Company ID mismatch")
    return auth
