"""Tests for the OAuth token endpoint client."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from urllib.parse import parse_qs

import httpx
import pytest

from leavebridge.config import Settings
from leavebridge.exceptions import ConfigurationError, TokenRefreshError, UpstreamError
from leavebridge.services.connection import get_connection
from leavebridge.services.token import (
    exchange_authorization_code,
    expiry_from,
    refresh_connection,
    require_client_credentials,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.models.zoho import ZohoConnection
    from tests.conftest import FakeZoho

COMPANY_ID = uuid.uuid4()
ACCOUNTS_URL = "https://accounts.zoho.com"
TOKEN_PATH = "/oauth/v2/token"


def test_expiry_from() -> None:
    issued = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
    assert expiry_from(issued, 3600) == datetime(2026, 3, 1, 13, 0, tzinfo=UTC)


def test_require_client_credentials_names_missing_settings(caplog: pytest.LogCaptureFixture) -> None:
    with pytest.raises(ConfigurationError, match="Zoho credentials not configured"):
        require_client_credentials(Settings(zoho_client_id="", zoho_client_secret="", zoho_redirect_uri=""))
    assert "ZOHO_CLIENT_ID" in caplog.text
    assert "ZOHO_CLIENT_SECRET" in caplog.text


def test_require_client_credentials_without_secret() -> None:
    settings = Settings(zoho_client_id="id", zoho_client_secret="", zoho_redirect_uri="http://x/cb")
    require_client_credentials(settings, need_secret=False)
    with pytest.raises(ConfigurationError):
        require_client_credentials(settings)


# ---------------------------------------------------------------------------
# Authorization code exchange
# ---------------------------------------------------------------------------


async def test_exchange_posts_authorization_code_grant(http_client: httpx.AsyncClient, zoho: FakeZoho) -> None:
    zoho.add(
        "POST",
        TOKEN_PATH,
        200,
        json={"access_token": "A1", "refresh_token": "R1", "expires_in": 3600, "api_domain": "https://www.zohoapis.com"},
    )

    tokens = await exchange_authorization_code(http_client, accounts_base_url=ACCOUNTS_URL, code="the-code")

    assert tokens.refresh_token == "R1"
    form = parse_qs(zoho.requests[0].content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["the-code"]
    assert form["client_id"] == ["test-client-id"]
    assert form["redirect_uri"] == ["http://testserver/zoho/callback"]


@pytest.mark.parametrize(
    ("status_code", "body", "text"),
    [
        (400, {"error": "invalid_client"}, None),
        (200, {"error": "invalid_code"}, None),
        (200, None, "<html>oops</html>"),
        (200, {"token_type": "Bearer"}, None),
    ],
)
async def test_exchange_failures_are_upstream_400(
    http_client: httpx.AsyncClient, zoho: FakeZoho, status_code: int, body: object, text: str | None
) -> None:
    zoho.add("POST", TOKEN_PATH, status_code, json=body, text=text)

    with pytest.raises(UpstreamError) as exc_info:
        await exchange_authorization_code(http_client, accounts_base_url=ACCOUNTS_URL, code="c")
    assert exc_info.value.status_code == 400


async def test_exchange_transport_error(http_client: httpx.AsyncClient, zoho: FakeZoho) -> None:
    zoho.fail("POST", TOKEN_PATH, httpx.ConnectError("refused"))

    with pytest.raises(UpstreamError, match="unreachable"):
        await exchange_authorization_code(http_client, accounts_base_url=ACCOUNTS_URL, code="c")


# ---------------------------------------------------------------------------
# Refresh
# ---------------------------------------------------------------------------


async def test_refresh_persists_new_access_token(
    db_session: AsyncSession,
    http_client: httpx.AsyncClient,
    zoho: FakeZoho,
    make_connection: Callable[..., Awaitable[ZohoConnection]],
) -> None:
    connection = await make_connection(COMPANY_ID, access_token="A1", refresh_token="R1")
    zoho.add("POST", TOKEN_PATH, 200, json={"access_token": "A2", "expires_in": 3600})

    await refresh_connection(db_session, http_client, connection)

    form = parse_qs(zoho.requests[0].content.decode())
    assert form["grant_type"] == ["refresh_token"]
    assert form["refresh_token"] == ["R1"]
    stored = await get_connection(db_session, COMPANY_ID)
    assert stored is not None
    assert stored.access_token == "A2"
    assert stored.refresh_token == "R1"


async def test_refresh_failure_writes_nothing(
    db_session: AsyncSession,
    http_client: httpx.AsyncClient,
    zoho: FakeZoho,
    make_connection: Callable[..., Awaitable[ZohoConnection]],
) -> None:
    connection = await make_connection(COMPANY_ID, access_token="A1")
    zoho.add("POST", TOKEN_PATH, 400, json={"error": "invalid_token"})

    with pytest.raises(TokenRefreshError) as exc_info:
        await refresh_connection(db_session, http_client, connection)

    assert exc_info.value.status_code == 401
    assert len(zoho.calls(TOKEN_PATH)) == 1
    stored = await get_connection(db_session, COMPANY_ID)
    assert stored is not None
    assert stored.access_token == "A1"
