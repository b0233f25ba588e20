# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from leaveflow.models.enums import Role


class UserResponse(BaseModel):
    """Public view of a user; the password hash is never included."""

    id: uuid.UUID
    name: str
    email: str
    role: Role
    leave_balance: int
    created_at: datetime


class UserListResponse(BaseModel):
    """List of users."""

    items: list[UserResponse]
    total: int


class BalanceOverridePayload(BaseModel):
    """Request body for an admin leave balance override."""

    leave_balance: int = Field(ge=0)
