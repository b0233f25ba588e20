from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from leaveflow.models.base import TimestampMixin, UUIDBase
from leaveflow.models.enums import Role


class User(UUIDBase, TimestampMixin, table=True):
    """An employee or admin account with its running leave balance."""

    __tablename__ = "users"
    __table_args__ = (sa.CheckConstraint("leave_balance >= 0", name="ck_users_leave_balance_non_negative"),)

    name: str = Field(max_length=255)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    role: str = Field(default=Role.EMPLOYEE, max_length=50, sa_column_kwargs={"server_default": "employee"})
    leave_balance: int = Field(default=25, sa_column_kwargs={"server_default": "25"})
