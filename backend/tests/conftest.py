from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from leavebridge import config
from leavebridge.config import Settings
from leavebridge.db import get_session
from leavebridge.main import app
from leavebridge.models import SQLModel
from leavebridge.models.base import now_utc
from leavebridge.models.zoho import EmployeeMapping, ZohoConnection
from leavebridge.services.employee import InMemoryEmployeeService, set_employee_service
from leavebridge.services.notification import InMemoryNotificationSender, set_notification_sender
from leavebridge.services.zoho_client import get_http_client

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

ACCOUNTS_URL = "https://accounts.zoho.com"
PEOPLE_URL = "https://people.zoho.com"
TOKEN_PATH = "/oauth/v2/token"


# ---------------------------------------------------------------------------
# Settings and collaborators
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Configured Zoho client for every test."""
    test_settings = Settings(
        secret_key="test-secret-key",
        frontend_url="http://frontend.test",
        zoho_client_id="test-client-id",
        zoho_client_secret="test-client-secret",
        zoho_redirect_uri="http://testserver/zoho/callback",
        zoho_accounts_url=ACCOUNTS_URL,
        zoho_people_url=PEOPLE_URL,
    )
    monkeypatch.setattr(config, "_settings", test_settings)
    return test_settings


@pytest.fixture(autouse=True)
def employees() -> Iterator[InMemoryEmployeeService]:
    """Fresh in-memory Employee Service; tests seed the profiles they need."""
    svc = InMemoryEmployeeService()
    set_employee_service(svc)
    yield svc
    set_employee_service(InMemoryEmployeeService())


@pytest.fixture(autouse=True)
def notifications() -> Iterator[InMemoryNotificationSender]:
    """Fresh in-memory notification sender that records what was sent."""
    sender = InMemoryNotificationSender()
    set_notification_sender(sender)
    yield sender
    set_notification_sender(InMemoryNotificationSender())


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Per-test database with all tables created.

    Defaults to a throwaway SQLite file; set TEST_DATABASE_URL to run against
    PostgreSQL instead.
    """
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'leavebridge.db'}"
    _engine = create_async_engine(url)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """A plain session: services commit and roll back exactly as in production."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


# ---------------------------------------------------------------------------
# Fake Zoho
# ---------------------------------------------------------------------------


@dataclass
class FakeZoho:
    """Scripted stand-in for the Zoho accounts and People servers.

    Responses are queued per (method, path); the last queued response repeats.
    """

    requests: list[httpx.Request] = field(default_factory=list)
    _routes: dict[tuple[str, str], list[Any]] = field(default_factory=dict)

    def add(self, method: str, path: str, status_code: int = 200, json: Any = None, text: str | None = None) -> None:
        self._routes.setdefault((method, path), []).append((status_code, json, text))

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self._routes.setdefault((method, path), []).append(exc)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": "no route"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        status_code, body, text = item
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=body)


@pytest.fixture
def zoho() -> FakeZoho:
    return FakeZoho()


@pytest.fixture
async def http_client(zoho: FakeZoho) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(zoho.handler)) as client:
        yield client


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def make_connection(db_session: AsyncSession) -> Callable[..., Awaitable[ZohoConnection]]:
    """Factory persisting a Zoho connection for a company."""

    async def _make(
        company_id: uuid.UUID,
        *,
        access_token: str = "access-1",
        refresh_token: str = "refresh-1",
        expires_at: datetime | None = None,
    ) -> ZohoConnection:
        connection = ZohoConnection(
            company_id=company_id,
            accounts_base_url=ACCOUNTS_URL,
            people_base_url=PEOPLE_URL,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at or now_utc() + timedelta(hours=1),
        )
        db_session.add(connection)
        await db_session.commit()
        return connection

    return _make


@pytest.fixture
def make_mapping(db_session: AsyncSession) -> Callable[..., Awaitable[EmployeeMapping]]:
    """Factory persisting an employee mapping."""

    async def _make(
        company_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        email: str = "jane@example.com",
        zoho_emp_id: str | None = None,
        erecno: str | None = None,
    ) -> EmployeeMapping:
        mapping = EmployeeMapping(
            company_id=company_id,
            app_user_id=user_id,
            email=email,
            zoho_emp_id=zoho_emp_id,
            erecno=erecno,
        )
        db_session.add(mapping)
        await db_session.commit()
        return mapping

    return _make


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


@pytest.fixture
async def async_client(db_session: AsyncSession, http_client: httpx.AsyncClient) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session and outbound client overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    async def _override_get_http_client() -> AsyncIterator[httpx.AsyncClient]:
        yield http_client

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_http_client] = _override_get_http_client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
