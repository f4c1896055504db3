"""Zoho OAuth token endpoint: authorization-code exchange and refresh."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from leavebridge.config import get_settings
from leavebridge.exceptions import ConfigurationError, TokenRefreshError, UpstreamError
from leavebridge.models.base import now_utc
from leavebridge.schemas.zoho import TokenResponse
from leavebridge.services.connection import save_refreshed_token

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.config import Settings
    from leavebridge.models.zoho import ZohoConnection

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/v2/token"


class TokenRequestError(Exception):
    """The token endpoint did not return a usable token."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


def token_url(accounts_base_url: str) -> str:
    return f"{accounts_base_url.rstrip('/')}{TOKEN_PATH}"


def expiry_from(now: datetime, expires_in: int) -> datetime:
    """Absolute expiry for a token issued at ``now`` lasting ``expires_in`` seconds."""
    return now + timedelta(seconds=expires_in)


def require_client_credentials(settings: Settings, *, need_secret: bool = True) -> None:
    """Raise ConfigurationError if the OAuth client is not configured."""
    missing = []
    if not settings.zoho_client_id:
        missing.append("ZOHO_CLIENT_ID")
    if need_secret and not settings.zoho_client_secret:
        missing.append("ZOHO_CLIENT_SECRET")
    if not settings.zoho_redirect_uri:
        missing.append("ZOHO_REDIRECT_URI")
    if missing:
        logger.error("Zoho OAuth client is not configured: missing %s", ", ".join(missing))
        raise ConfigurationError("Zoho credentials not configured")


async def _post_token_request(client: httpx.AsyncClient, url: str, form: dict[str, str]) -> TokenResponse:
    """POST a form to the token endpoint and parse the token body.

    Zoho reports some failures (e.g. ``invalid_code``) with HTTP 200 and an
    ``error`` field, so the body is checked as well as the status.
    """
    try:
        response = await client.post(
            url,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except httpx.HTTPError as exc:
        raise TokenRequestError(f"Token endpoint unreachable: {type(exc).__name__}") from exc

    if not response.is_success:
        logger.warning(
            "Zoho token endpoint returned %s: %s",
            response.status_code,
            response.text[:500],
        )
        raise TokenRequestError(f"Token endpoint returned {response.status_code}", response.status_code)

    try:
        payload = response.json()
    except ValueError as exc:
        raise TokenRequestError("Token endpoint returned a non-JSON body", response.status_code) from exc

    if isinstance(payload, dict) and payload.get("error"):
        logger.warning("Zoho token endpoint reported error=%s", payload["error"])
        raise TokenRequestError(f"Token endpoint error: {payload['error']}", response.status_code)

    try:
        return TokenResponse.model_validate(payload)
    except ValidationError as exc:
        raise TokenRequestError("Token endpoint returned an unexpected body", response.status_code) from exc


async def exchange_authorization_code(
    client: httpx.AsyncClient,
    *,
    accounts_base_url: str,
    code: str,
) -> TokenResponse:
    """Exchange an authorization code for access and refresh tokens."""
    settings = get_settings()
    require_client_credentials(settings)

    try:
        tokens = await _post_token_request(
            client,
            token_url(accounts_base_url),
            {
                "grant_type": "authorization_code",
                "client_id": settings.zoho_client_id,
                "client_secret": settings.zoho_client_secret,
                "redirect_uri": settings.zoho_redirect_uri,
                "code": code,
            },
        )
    except TokenRequestError as exc:
        raise UpstreamError(f"Token exchange failed: {exc}", status_code=400) from exc

    logger.info(
        "Zoho token exchange successful: expires_in=%s api_domain=%s",
        tokens.expires_in,
        tokens.api_domain,
    )
    return tokens


async def refresh_connection(
    session: AsyncSession,
    client: httpx.AsyncClient,
    connection: ZohoConnection,
) -> ZohoConnection:
    """Exchange the stored refresh token for a new access token and persist it.

    Exactly one attempt; on failure nothing is written and TokenRefreshError
    is raised.
    """
    settings = get_settings()
    require_client_credentials(settings)

    logger.info("Refreshing Zoho access token for company=%s", connection.company_id)
    issued_at = now_utc()
    try:
        tokens = await _post_token_request(
            client,
            token_url(connection.accounts_base_url),
            {
                "grant_type": "refresh_token",
                "client_id": settings.zoho_client_id,
                "client_secret": settings.zoho_client_secret,
                "refresh_token": connection.refresh_token,
            },
        )
    except TokenRequestError as exc:
        logger.error("Zoho token refresh failed for company=%s: %s", connection.company_id, exc)
        raise TokenRefreshError() from exc

    return await save_refreshed_token(
        session,
        connection,
        access_token=tokens.access_token,
        expires_at=expiry_from(issued_at, tokens.expires_in),
        refresh_token=tokens.refresh_token,
    )
