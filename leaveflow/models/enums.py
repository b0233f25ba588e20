from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Tagged role value checked by the API guards."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class LeaveType(enum.StrEnum):
    """Kind of leave being requested."""

    ANNUAL = "annual"
    SICK = "sick"
    PERSONAL = "personal"
    EMERGENCY = "emergency"


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationKind(enum.StrEnum):
    """Lifecycle events that trigger a chat notification."""

    NEW_REQUEST = "new_request"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    USER = "USER"
    REQUEST = "REQUEST"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    REGISTER = "REGISTER"
    SUBMIT = "SUBMIT"
    AMEND = "AMEND"
    WITHDRAW = "WITHDRAW"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    BALANCE_OVERRIDE = "BALANCE_OVERRIDE"
