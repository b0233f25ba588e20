# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlmodel import col

from leaveflow.exceptions import InsufficientBalance, UserNotFound
from leaveflow.models.user import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def get_balance(session: AsyncSession, user_id: uuid.UUID) -> int:
    """Read the committed leave balance for a user straight from the database."""
    result = await session.execute(select(col(User.leave_balance)).where(col(User.id) == user_id))
    balance = result.scalar_one_or_none()
    if balance is None:
        raise UserNotFound
    return int(balance)


async def debit_balance(session: AsyncSession, user_id: uuid.UUID, days: int) -> int:
    """Subtract days from the balance in one conditional UPDATE and return the new balance.

    The sufficiency check lives in the WHERE clause, so two concurrent debits
    can never both pass against the same pre-debit balance. Raises
    InsufficientBalance, with nothing written, when the balance is short.
    """
    if days <= 0:
        return await get_balance(session, user_id)

    result = await session.execute(
        update(User)
        .where(col(User.id) == user_id, col(User.leave_balance) >= days)
        .values(leave_balance=col(User.leave_balance) - days)
        .returning(col(User.leave_balance))
        .execution_options(synchronize_session=False)
    )
    new_balance = result.scalar_one_or_none()
    if new_balance is None:
        available = await get_balance(session, user_id)
        raise InsufficientBalance(required=days, available=available)

    logger.debug("Debited %d day(s) from user %s, balance now %d", days, user_id, new_balance)
    return int(new_balance)


async def credit_balance(session: AsyncSession, user_id: uuid.UUID, days: int) -> int:
    """Add days back to the balance in one UPDATE and return the new balance."""
    if days <= 0:
        return await get_balance(session, user_id)

    result = await session.execute(
        update(User)
        .where(col(User.id) == user_id)
        .values(leave_balance=col(User.leave_balance) + days)
        .returning(col(User.leave_balance))
        .execution_options(synchronize_session=False)
    )
    new_balance = result.scalar_one_or_none()
    if new_balance is None:
        raise UserNotFound

    logger.debug("Credited %d day(s) to user %s, balance now %d", days, user_id, new_balance)
    return int(new_balance)


async def adjust_balance(session: AsyncSession, user_id: uuid.UUID, delta_days: int) -> int:
    """Apply a signed change in days used: positive debits, negative credits."""
    if delta_days > 0:
        return await debit_balance(session, user_id, delta_days)
    return await credit_balance(session, user_id, -delta_days)
