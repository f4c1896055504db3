# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavebridge.exceptions import NotFoundError
from leavebridge.models.base import now_utc
from leavebridge.models.zoho import ZohoConnection
from leavebridge.schemas.zoho import ConnectionStatusResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def get_connection(session: AsyncSession, company_id: uuid.UUID) -> ZohoConnection | None:
    """Return the company's connection as currently persisted.

    ``populate_existing`` overwrites any copy already in the identity map, so
    a token written by a concurrent refresh is always observed.
    """
    result = await session.execute(
        select(ZohoConnection)
        .where(col(ZohoConnection.company_id) == company_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_connection_or_404(session: AsyncSession, company_id: uuid.UUID) -> ZohoConnection:
    """Fetch the company's connection. Raises 404 if Zoho is not connected."""
    connection = await get_connection(session, company_id)
    if connection is None:
        raise NotFoundError("Zoho is not connected")
    return connection


async def upsert_connection(
    session: AsyncSession,
    *,
    company_id: uuid.UUID,
    accounts_base_url: str,
    people_base_url: str,
    access_token: str,
    refresh_token: str,
    expires_at: datetime,
) -> tuple[ZohoConnection, bool]:
    """Insert or replace the company's connection. Returns (connection, created).

    Does not commit. A concurrent first connection for the same company that
    wins the insert is replaced instead; the session is rolled back for that,
    so nothing else may be pending in it.
    """
    connection = await get_connection(session, company_id)
    if connection is None:
        connection = ZohoConnection(
            company_id=company_id,
            accounts_base_url=accounts_base_url,
            people_base_url=people_base_url,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )
        session.add(connection)
        try:
            await session.flush()
        except IntegrityError:
            await session.rollback()
            logger.info("Zoho connection for company=%s was created concurrently; replacing it", company_id)
            connection = await get_connection(session, company_id)
            if connection is None:
                raise
        else:
            return connection, True

    connection.accounts_base_url = accounts_base_url
    connection.people_base_url = people_base_url
    connection.access_token = access_token
    connection.refresh_token = refresh_token
    connection.expires_at = expires_at
    connection.updated_at = now_utc()
    await session.flush()
    return connection, False


async def save_refreshed_token(
    session: AsyncSession,
    connection: ZohoConnection,
    *,
    access_token: str,
    expires_at: datetime,
    refresh_token: str | None = None,
) -> ZohoConnection:
    """Persist a refreshed access token. Last writer wins."""
    connection.access_token = access_token
    connection.expires_at = expires_at
    if refresh_token:
        connection.refresh_token = refresh_token
    connection.updated_at = now_utc()
    await session.commit()
    logger.info("Stored refreshed Zoho token for company=%s expires_at=%s", connection.company_id, expires_at)
    return connection


async def get_connection_status(session: AsyncSession, company_id: uuid.UUID) -> ConnectionStatusResponse:
    """Describe the company's connection without exposing any token."""
    connection = await get_connection(session, company_id)
    if connection is None:
        return ConnectionStatusResponse(connected=False)
    return ConnectionStatusResponse(
        connected=True,
        expired=connection.is_expired(now_utc()),
        expires_at=connection.expires_at,
        people_base_url=connection.people_base_url,
        accounts_base_url=connection.accounts_base_url,
        updated_at=connection.updated_at,
    )
