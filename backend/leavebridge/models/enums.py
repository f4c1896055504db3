from __future__ import annotations

import enum


class UserRole(enum.StrEnum):
    """Role of a local user."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class LeaveType(enum.StrEnum):
    """Kind of leave an employee can request."""

    ANNUAL = "annual"
    SICK = "sick"
    PERSONAL = "personal"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    EMERGENCY = "emergency"
    UNPAID = "unpaid"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests. Only PENDING has outgoing transitions."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Decision(enum.StrEnum):
    """Outcome an approver can record on a pending request."""

    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(enum.StrEnum):
    """Leave events that trigger a notification."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class AuditEntityType(enum.StrEnum):
    """Table recorded in the audit log."""

    LEAVE_REQUEST = "leave_request"
    LEAVE_POLICY = "leave_policy"
    LEAVE_BALANCE = "leave_balance"
    ZOHO_CONNECTION = "zoho_connection"
    EMPLOYEE_MAPPING = "zoho_employee_mapping"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    CONNECT = "CONNECT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    NOTIFY = "NOTIFY"
