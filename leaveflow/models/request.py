# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from leaveflow.models.base import TimestampMixin, UUIDBase
from leaveflow.models.enums import RequestStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """A user's leave request with its approval workflow state."""

    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.Index("ix_leave_requests_user_status", "user_id", "status"),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_requests_date_order"),
    )

    user_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    start_date: date
    end_date: date
    leave_type: str = Field(max_length=50)
    reason: str
    status: str = Field(
        default=RequestStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "pending"}
    )
