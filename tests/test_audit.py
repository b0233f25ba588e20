"""Tests for audit snapshots and the entries written by ledger operations."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leaveflow.models.audit import AuditLog
from leaveflow.models.enums import AuditAction
from leaveflow.models.request import LeaveRequest
from leaveflow.models.user import User
from leaveflow.services.audit import audit_request_change, audit_user_change, snapshot

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def _user() -> User:
    return User(name="Eve Employee", email="eve@example.com", password_hash="$2b$04$secret", leave_balance=7)


def _request(user_id: uuid.UUID) -> LeaveRequest:
    return LeaveRequest(
        user_id=user_id,
        start_date=date(2024, 6, 10),
        end_date=date(2024, 6, 12),
        leave_type="annual",
        reason="Family trip",
    )


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


def test_snapshot_drops_password_hash() -> None:
    data = snapshot(_user())
    assert "password_hash" not in data
    assert data["email"] == "eve@example.com"
    assert data["leave_balance"] == 7


def test_snapshot_is_json_safe() -> None:
    user_id = uuid.uuid4()
    data = snapshot(_request(user_id))
    assert data["user_id"] == str(user_id)
    assert data["start_date"] == "2024-06-10"
    assert data["status"] == "pending"
    assert isinstance(data["created_at"], str)


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


async def test_request_change_merges_ledger_values(db_session: AsyncSession) -> None:
    user = _user()
    request = _request(user.id)
    db_session.add_all([user, request])

    entry = await audit_request_change(
        db_session,
        actor_id=user.id,
        request=request,
        action=AuditAction.SUBMIT,
        days=3,
        leave_balance=4,
    )
    await db_session.commit()

    assert entry.entity_type == "REQUEST"
    assert entry.entity_id == request.id
    assert entry.before_json is None
    assert entry.after_json is not None
    assert entry.after_json["reason"] == "Family trip"
    assert entry.after_json["days"] == 3
    assert entry.after_json["leave_balance"] == 4


async def test_deleted_request_keeps_only_ledger_values(db_session: AsyncSession) -> None:
    user = _user()
    request = _request(user.id)
    before = snapshot(request)

    entry = await audit_request_change(
        db_session,
        actor_id=user.id,
        request=request,
        action=AuditAction.WITHDRAW,
        before=before,
        deleted=True,
        credited_days=3,
        leave_balance=10,
    )
    assert entry.before_json == before
    assert entry.after_json == {"credited_days": 3, "leave_balance": 10}


async def test_user_change_is_redacted(db_session: AsyncSession) -> None:
    user = _user()
    db_session.add(user)
    entry = await audit_user_change(db_session, actor_id=user.id, user=user, action=AuditAction.REGISTER)
    await db_session.commit()

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.id) == entry.id))
    stored = result.scalar_one()
    assert stored.entity_type == "USER"
    assert stored.action == "REGISTER"
    assert stored.after_json is not None
    assert "password_hash" not in stored.after_json
