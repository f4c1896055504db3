# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavebridge.models.base import TimestampMixin, UTCDateTime, UUIDBase


class ZohoConnection(UUIDBase, TimestampMixin, table=True):
    """A company's OAuth grant to Zoho People. One row per company."""

    __tablename__ = "zoho_connection"
    __table_args__ = (sa.UniqueConstraint("company_id", name="uq_zoho_connection_company"),)

    company_id: uuid.UUID = Field(index=True)
    accounts_base_url: str = Field(max_length=255)
    people_base_url: str = Field(max_length=255)
    access_token: str = Field(sa_type=sa.Text)
    refresh_token: str = Field(sa_type=sa.Text)
    expires_at: datetime = Field(sa_type=UTCDateTime)  # ty: ignore[invalid-argument-type]

    def is_expired(self, now: datetime) -> bool:
        """Return True when the access token is no longer usable at ``now``."""
        return now >= self.expires_at


class EmployeeMapping(UUIDBase, TimestampMixin, table=True):
    """Links a local user to the identifiers Zoho People uses for them."""

    __tablename__ = "zoho_employee_mapping"
    __table_args__ = (sa.UniqueConstraint("company_id", "app_user_id", name="uq_zoho_mapping_company_user"),)

    company_id: uuid.UUID = Field(index=True)
    app_user_id: uuid.UUID = Field(index=True)
    zoho_emp_id: str | None = Field(default=None, max_length=255)
    erecno: str | None = Field(default=None, max_length=255)
    email: str = Field(max_length=320)

    @property
    def is_complete(self) -> bool:
        """Email alone is a weak identifier; a complete mapping has an id or record number."""
        return bool(self.zoho_emp_id or self.erecno)
