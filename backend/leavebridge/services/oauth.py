"""Zoho People OAuth authorization flow: initiate and callback."""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from urllib.parse import urlencode, urlsplit

from jose import JWTError, jwt
from pydantic import ValidationError

from leavebridge.config import get_settings
from leavebridge.exceptions import BadRequestError
from leavebridge.models.base import now_utc
from leavebridge.models.enums import AuditAction, AuditEntityType
from leavebridge.schemas.zoho import AuthorizeResponse, CallbackResponse, OAuthState
from leavebridge.services.audit import model_to_audit_dict, write_audit_log
from leavebridge.services.connection import get_connection, upsert_connection
from leavebridge.services.token import exchange_authorization_code, expiry_from, require_client_credentials

if TYPE_CHECKING:
    import httpx
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavebridge.config import Settings
    from leavebridge.schemas.auth import AuthContext
    from leavebridge.schemas.zoho import CallbackParams, TokenResponse

logger = logging.getLogger(__name__)

AUTHORIZE_PATH = "/oauth/v2/auth"
_STATE_ALGORITHM = "HS256"
_STATE_AUDIENCE = "zoho-oauth-state"

# Zoho data centres keyed by the ``location`` value appended to the redirect.
_DOMAIN_BY_LOCATION = {
    "us": "zoho.com",
    "eu": "zoho.eu",
    "in": "zoho.in",
    "au": "zoho.com.au",
    "cn": "zoho.com.cn",
    "jp": "zoho.jp",
    "ca": "zohocloud.ca",
    "sa": "zoho.sa",
    "uk": "zoho.uk",
}
_ACCOUNTS_HOSTS = frozenset(f"accounts.{domain}" for domain in _DOMAIN_BY_LOCATION.values())


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


def encode_state(settings: Settings, company_id: str, user_id: str, *, now: datetime | None = None) -> str:
    """Sign an unpredictable, short-lived state value bound to the company and user."""
    issued = now or datetime.now(UTC)
    claims = {
        "company_id": company_id,
        "user_id": user_id,
        "nonce": secrets.token_urlsafe(24),
        "aud": _STATE_AUDIENCE,
        "iat": issued,
        "exp": issued + timedelta(seconds=settings.oauth_state_ttl_seconds),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=_STATE_ALGORITHM)


def decode_state(settings: Settings, state: str) -> OAuthState:
    """Verify and decode a state value. Any failure is a BadRequestError."""
    try:
        claims = jwt.decode(state, settings.secret_key, algorithms=[_STATE_ALGORITHM], audience=_STATE_AUDIENCE)
        return OAuthState.model_validate(claims)
    except (JWTError, ValidationError) as exc:
        logger.warning("Rejected OAuth state: %s", type(exc).__name__)
        raise BadRequestError("Invalid state parameter") from exc


# ---------------------------------------------------------------------------
# Region resolution
# ---------------------------------------------------------------------------


def resolve_accounts_url(settings: Settings, accounts_server: str | None) -> str:
    """Pick the accounts server for the token exchange.

    The value comes from the browser, so it is only honoured when it is an
    https Zoho accounts host; the client secret is never sent elsewhere.
    """
    if not accounts_server:
        return settings.zoho_accounts_url.rstrip("/")
    try:
        parts = urlsplit(accounts_server)
        hostname = parts.hostname
    except ValueError as exc:
        raise BadRequestError("Invalid accounts-server parameter") from exc
    if parts.scheme != "https" or hostname not in _ACCOUNTS_HOSTS:
        raise BadRequestError("Invalid accounts-server parameter")
    return f"https://{hostname}"


def resolve_people_url(settings: Settings, api_domain: str | None, location: str | None) -> str:
    """Derive the regional People base URL from the token response or the redirect."""
    if api_domain:
        return api_domain.rstrip("/").replace("www.zohoapis", "people.zoho")
    if location and location.lower() in _DOMAIN_BY_LOCATION:
        return f"https://people.{_DOMAIN_BY_LOCATION[location.lower()]}"
    return settings.zoho_people_url.rstrip("/")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_authorization_url(auth: AuthContext) -> AuthorizeResponse:
    """Build the Zoho consent URL for an administrator to start the connection."""
    settings = get_settings()
    require_client_credentials(settings, need_secret=False)

    state = encode_state(settings, str(auth.company_id), str(auth.user_id))
    query = urlencode(
        {
            "response_type": "code",
            "client_id": settings.zoho_client_id,
            "scope": ",".join(settings.zoho_scopes),
            "redirect_uri": settings.zoho_redirect_uri,
            "state": state,
            "access_type": "offline",
        }
    )
    auth_url = f"{settings.zoho_accounts_url.rstrip('/')}{AUTHORIZE_PATH}?{query}"
    logger.info("Generated Zoho authorization URL for company=%s", auth.company_id)
    return AuthorizeResponse(auth_url=auth_url, state=state)


async def handle_callback(
    session: AsyncSession,
    client: httpx.AsyncClient,
    params: CallbackParams,
) -> CallbackResponse:
    """Consume an authorization code and store the resulting connection.

    Nothing is written unless every step succeeds.
    """
    if params.error:
        raise BadRequestError(f"Zoho authorization failed: {params.error}")
    if not params.code:
        raise BadRequestError("Missing authorization code")
    if not params.state:
        raise BadRequestError("Missing state parameter")

    settings = get_settings()
    require_client_credentials(settings)
    state = decode_state(settings, params.state)
    accounts_url = resolve_accounts_url(settings, params.accounts_server)

    issued_at = now_utc()
    tokens = await exchange_authorization_code(client, accounts_base_url=accounts_url, code=params.code)
    refresh_token = await _refresh_token_for(session, state, tokens)

    connection, created = await upsert_connection(
        session,
        company_id=state.company_id,
        accounts_base_url=accounts_url,
        people_base_url=resolve_people_url(settings, tokens.api_domain, params.location),
        access_token=tokens.access_token,
        refresh_token=refresh_token,
        expires_at=expiry_from(issued_at, tokens.expires_in),
    )
    await write_audit_log(
        session,
        company_id=state.company_id,
        actor_id=state.user_id,
        entity_type=AuditEntityType.ZOHO_CONNECTION,
        entity_id=connection.id,
        action=AuditAction.CONNECT,
        after_json=model_to_audit_dict(connection),
    )
    await session.commit()

    logger.info("Zoho connected for company=%s (created=%s)", state.company_id, created)
    return CallbackResponse(company_id=state.company_id, created=created)


async def _refresh_token_for(session: AsyncSession, state: OAuthState, tokens: TokenResponse) -> str:
    """Refresh token to store: the newly issued one, else the one already on record."""
    if tokens.refresh_token:
        return tokens.refresh_token
    existing = await get_connection(session, state.company_id)
    if existing is None:
        raise BadRequestError("Zoho did not issue a refresh token; reconnect with offline access")
    return existing.refresh_token
