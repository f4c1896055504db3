from sqlmodel import SQLModel

from leavebridge.models.audit import AuditLog
from leavebridge.models.balance import LeaveBalance
from leavebridge.models.base import TimestampMixin, UTCDateTime, UUIDBase
from leavebridge.models.enums import (
    AuditAction,
    AuditEntityType,
    Decision,
    LeaveStatus,
    LeaveType,
    NotificationType,
    UserRole,
)
from leavebridge.models.policy import LeavePolicy
from leavebridge.models.request import LeaveApproval, LeaveRequest
from leavebridge.models.zoho import EmployeeMapping, ZohoConnection

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "Decision",
    "EmployeeMapping",
    "LeaveApproval",
    "LeaveBalance",
    "LeavePolicy",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "NotificationType",
    "SQLModel",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDBase",
    "UserRole",
    "ZohoConnection",
]
