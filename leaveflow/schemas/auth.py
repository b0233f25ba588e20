# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel, EmailStr, Field

from leaveflow.models.enums import Role
from leaveflow.schemas.user import UserResponse


class AuthContext(BaseModel):
    """Authenticated caller resolved from the session token."""

    user_id: uuid.UUID
    name: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class RegisterPayload(BaseModel):
    """Request body for creating a user account."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    role: Role = Role.EMPLOYEE
    leave_balance: int | None = Field(default=None, ge=0)


class LoginPayload(BaseModel):
    """Request body for password login."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class LoginResponse(BaseModel):
    """Issued session token plus the logged-in user."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
