# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from leaveflow.api.deps import AdminDep, AuthDep
from leaveflow.db import SessionDep
from leaveflow.schemas.user import BalanceOverridePayload, UserListResponse, UserResponse
from leaveflow.services import user as user_service

users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.get("/me", response_model=UserResponse)
async def get_me(
    session: SessionDep,
    auth: AuthDep,
) -> UserResponse:
    """Get the current user, including the live leave balance."""
    return await user_service.get_user(session, auth.user_id)


@users_router.get("", response_model=UserListResponse)
async def list_users(
    session: SessionDep,
    auth: AdminDep,
) -> UserListResponse:
    """List all users (admin only)."""
    return await user_service.list_users(session)


@users_router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> UserResponse:
    """Get a single user (admin only)."""
    return await user_service.get_user(session, user_id)


@users_router.patch("/{user_id}/leave-balance", response_model=UserResponse)
async def override_leave_balance(
    user_id: uuid.UUID,
    payload: BalanceOverridePayload,
    session: SessionDep,
    auth: AdminDep,
) -> UserResponse:
    """Set a user's leave balance to an explicit value (admin only)."""
    return await user_service.override_balance(session, auth, user_id, payload.leave_balance)
