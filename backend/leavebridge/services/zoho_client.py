"""Authenticated calls to the Zoho People API.

Every call reads the connection from the store, sends it with the Zoho
bearer scheme and, on a 401, refreshes once and reissues once. Whatever the
reissue returns is final.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from leavebridge.config import get_settings
from leavebridge.exceptions import RemoteAuthError, TokenRefreshError, UpstreamError
from leavebridge.models.base import now_utc
from leavebridge.services.connection import get_connection_or_404
from leavebridge.services.token import refresh_connection

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.models.zoho import ZohoConnection

logger = logging.getLogger(__name__)

AUTH_SCHEME = "Zoho-oauthtoken"


@dataclass(frozen=True)
class RemoteResult:
    """Outcome of one authenticated call, after any refresh and reissue."""

    status_code: int
    data: Any
    text: str
    refreshed: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """FastAPI dependency yielding an outbound client with an explicit timeout."""
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        yield client


def auth_header(access_token: str) -> dict[str, str]:
    return {"Authorization": f"{AUTH_SCHEME} {access_token}"}


async def _send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    access_token: str,
    params: Mapping[str, str] | None,
    data: Mapping[str, str] | None,
) -> httpx.Response:
    try:
        return await client.request(method, url, params=params, data=data, headers=auth_header(access_token))
    except httpx.HTTPError as exc:
        logger.warning("Zoho request %s %s failed: %s", method, url, type(exc).__name__)
        raise UpstreamError("Zoho is unreachable; try again later") from exc


def _to_result(response: httpx.Response, *, refreshed: bool) -> RemoteResult:
    try:
        data = response.json()
    except ValueError:
        data = None
    return RemoteResult(status_code=response.status_code, data=data, text=response.text, refreshed=refreshed)


async def _refresh(
    session: AsyncSession,
    client: httpx.AsyncClient,
    connection: ZohoConnection,
) -> ZohoConnection:
    try:
        return await refresh_connection(session, client, connection)
    except TokenRefreshError as exc:
        raise RemoteAuthError() from exc


async def call_zoho(
    session: AsyncSession,
    client: httpx.AsyncClient,
    company_id: uuid.UUID,
    method: str,
    url: str,
    *,
    params: Mapping[str, str] | None = None,
    data: Mapping[str, str] | None = None,
) -> RemoteResult:
    """Issue an authenticated request, refreshing the token at most once.

    1. Read the connection. An already-expired token is refreshed up front,
       which uses up the single refresh.
    2. Send.
    3. On 401 with the refresh still unused: refresh, then reissue once and
       return that result as is. A failed refresh raises RemoteAuthError and
       nothing is reissued.
    """
    connection = await get_connection_or_404(session, company_id)
    refreshed = False

    if connection.is_expired(now_utc()):
        connection = await _refresh(session, client, connection)
        refreshed = True

    response = await _send(client, method, url, connection.access_token, params, data)
    if response.status_code != httpx.codes.UNAUTHORIZED or refreshed:
        return _to_result(response, refreshed=refreshed)

    logger.info("Zoho returned 401 for company=%s; refreshing and retrying once", company_id)
    connection = await _refresh(session, client, connection)
    response = await _send(client, method, url, connection.access_token, params, data)
    return _to_result(response, refreshed=True)


def require_ok(result: RemoteResult, what: str) -> Any:
    """Return the parsed body of a successful result, else raise UpstreamError."""
    if result.ok:
        return result.data
    logger.error("Zoho %s failed: status=%s body=%s", what, result.status_code, result.text[:500])
    if result.status_code == httpx.codes.UNAUTHORIZED:
        raise RemoteAuthError()
    raise UpstreamError(f"Zoho {what} failed with status {result.status_code}", status_code=result.status_code)
