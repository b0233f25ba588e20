# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leaveflow.config import get_settings
from leaveflow.exceptions import Conflict, Unauthorized, UserNotFound
from leaveflow.models.enums import AuditAction, Role
from leaveflow.models.user import User
from leaveflow.schemas.user import UserListResponse, UserResponse
from leaveflow.security import hash_password, verify_password
from leaveflow.services.audit import audit_user_change, snapshot

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leaveflow.schemas.auth import AuthContext, RegisterPayload

logger = logging.getLogger(__name__)


def build_user_response(user: User) -> UserResponse:
    """Map a user model to its public response schema."""
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=Role(user.role),
        leave_balance=user.leave_balance,
        created_at=user.created_at,
    )


async def get_user_or_404(session: AsyncSession, user_id: uuid.UUID) -> User:
    """Fetch a user by ID. Raises UserNotFound if absent."""
    result = await session.execute(
        select(User).where(col(User.id) == user_id).execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFound
    return user


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(
        select(User).where(col(User.email) == email).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def register_user(session: AsyncSession, payload: RegisterPayload) -> UserResponse:
    """Create a user account with a hashed password and the opening leave balance."""
    if await get_user_by_email(session, payload.email) is not None:
        raise Conflict("User already exists")

    leave_balance = payload.leave_balance
    if leave_balance is None:
        leave_balance = get_settings().default_leave_balance

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role.value,
        leave_balance=leave_balance,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise Conflict("User already exists") from None

    await audit_user_change(session, actor_id=user.id, user=user, action=AuditAction.REGISTER)

    await session.commit()
    await session.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role)
    return build_user_response(user)


async def authenticate_user(session: AsyncSession, email: str, password: str) -> User:
    """Return the user whose credentials match. Raises Unauthorized otherwise."""
    user = await get_user_by_email(session, email)
    if user is None:
        raise Unauthorized("Invalid credentials")
    if not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    return user


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> UserResponse:
    """Get a single user by ID."""
    user = await get_user_or_404(session, user_id)
    return build_user_response(user)


async def list_users(session: AsyncSession) -> UserListResponse:
    """List all users ordered by name."""
    count_result = await session.execute(select(func.count()).select_from(User))
    total = count_result.scalar_one()

    result = await session.execute(
        select(User).order_by(col(User.name), col(User.email)).execution_options(populate_existing=True)
    )
    users = list(result.scalars().all())
    return UserListResponse(items=[build_user_response(u) for u in users], total=total)


async def override_balance(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID,
    leave_balance: int,
) -> UserResponse:
    """Set a user's leave balance to an explicit value (admin only)."""
    user = await get_user_or_404(session, user_id)
    before_dict = snapshot(user)

    user.leave_balance = leave_balance
    await session.flush()

    await audit_user_change(
        session,
        actor_id=auth.user_id,
        user=user,
        action=AuditAction.BALANCE_OVERRIDE,
        before=before_dict,
    )

    await session.commit()
    await session.refresh(user)
    logger.info("Leave balance of user %s set to %d by %s", user.id, leave_balance, auth.user_id)
    return build_user_response(user)
