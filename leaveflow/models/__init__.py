from sqlmodel import SQLModel

from leaveflow.models.audit import AuditLog
from leaveflow.models.base import TimestampMixin, UUIDBase
from leaveflow.models.enums import (
    AuditAction,
    AuditEntityType,
    LeaveType,
    NotificationKind,
    RequestStatus,
    Role,
)
from leaveflow.models.request import LeaveRequest
from leaveflow.models.user import User

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "LeaveRequest",
    "LeaveType",
    "NotificationKind",
    "RequestStatus",
    "Role",
    "SQLModel",
    "TimestampMixin",
    "User",
    "UUIDBase",
]
