# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import logging
import uuid
from typing import Annotated
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse

from leavebridge.api.deps import AdminDep, AuthDep, validate_company_scope
from leavebridge.config import get_settings
from leavebridge.db import SessionDep
from leavebridge.exceptions import AppError
from leavebridge.schemas.zoho import (
    AuthorizeResponse,
    CallbackParams,
    CallbackResponse,
    ConnectionStatusResponse,
    MappingPayload,
    MappingResponse,
)
from leavebridge.services import mapping as mapping_service
from leavebridge.services import oauth as oauth_service
from leavebridge.services.connection import get_connection_status
from leavebridge.services.zoho_client import get_http_client

logger = logging.getLogger(__name__)

HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]

integrations_router = APIRouter(
    prefix="/companies/{company_id}/zoho",
    tags=["zoho"],
    dependencies=[Depends(validate_company_scope)],
)

# Zoho redirects the browser here without identity headers; the signed state
# carries the company and user instead.
callback_router = APIRouter(prefix="/zoho", tags=["zoho"])


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


@integrations_router.post("/authorize", response_model=AuthorizeResponse)
async def authorize(auth: AdminDep) -> AuthorizeResponse:
    """Build the Zoho consent URL (admin only)."""
    return oauth_service.build_authorization_url(auth)


@integrations_router.get("/connection", response_model=ConnectionStatusResponse)
async def connection_status(session: SessionDep, auth: AuthDep) -> ConnectionStatusResponse:
    """Report whether the company is connected to Zoho."""
    return await get_connection_status(session, auth.company_id)


async def _complete_callback(
    request: Request,
    session: SessionDep,
    client: httpx.AsyncClient,
    params: CallbackParams,
) -> CallbackResponse | RedirectResponse:
    if "text/html" not in request.headers.get("accept", ""):
        return await oauth_service.handle_callback(session, client, params)

    target = f"{get_settings().frontend_url.rstrip('/')}/zoho/callback"
    try:
        await oauth_service.handle_callback(session, client, params)
    except AppError as exc:
        logger.warning("Zoho callback failed: %s (%s)", type(exc).__name__, exc.message)
        query = urlencode({"error": type(exc).__name__})
        return RedirectResponse(f"{target}?{query}", status_code=status.HTTP_302_FOUND)
    return RedirectResponse(f"{target}?success=true", status_code=status.HTTP_302_FOUND)


@callback_router.get("/callback", response_model=None)
async def callback_redirect(
    request: Request,
    session: SessionDep,
    client: HttpClientDep,
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    location: str | None = Query(default=None),
    accounts_server: str | None = Query(default=None, alias="accounts-server"),
    error: str | None = Query(default=None),
) -> CallbackResponse | RedirectResponse:
    """Zoho redirect target: exchange the code and store the connection."""
    params = CallbackParams(
        code=code, state=state, location=location, accounts_server=accounts_server, error=error
    )
    return await _complete_callback(request, session, client, params)


@callback_router.post("/callback", response_model=None)
async def callback_json(
    request: Request,
    params: CallbackParams,
    session: SessionDep,
    client: HttpClientDep,
) -> CallbackResponse | RedirectResponse:
    """Same as the redirect target, with the parameters forwarded in a JSON body."""
    return await _complete_callback(request, session, client, params)


# ---------------------------------------------------------------------------
# Employee mappings
# ---------------------------------------------------------------------------


@integrations_router.get("/mappings", response_model=list[MappingResponse])
async def list_mappings(session: SessionDep, auth: AdminDep) -> list[MappingResponse]:
    """List the company's local-to-Zoho employee mappings."""
    return await mapping_service.list_mappings(session, auth.company_id)


@integrations_router.put("/mappings/{user_id}", response_model=MappingResponse)
async def upsert_mapping(
    user_id: uuid.UUID,
    payload: MappingPayload,
    session: SessionDep,
    auth: AdminDep,
) -> MappingResponse:
    """Create or replace a user's Zoho identifiers."""
    return await mapping_service.upsert_mapping(session, auth, user_id, payload)


@integrations_router.delete("/mappings/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def delete_mapping(user_id: uuid.UUID, session: SessionDep, auth: AdminDep) -> None:
    """Remove a user's Zoho mapping."""
    await mapping_service.delete_mapping(session, auth, user_id)
