from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from leaveflow.models.audit import AuditLog
from leaveflow.models.enums import AuditEntityType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from leaveflow.models.enums import AuditAction
    from leaveflow.models.request import LeaveRequest
    from leaveflow.models.user import User

# Never copied into audit snapshots.
_REDACTED_FIELDS = frozenset({"password_hash"})


def _json_safe(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value


def snapshot(model: SQLModel) -> dict[str, Any]:
    """JSON-safe copy of a model's columns, minus credentials."""
    return {key: _json_safe(value) for key, value in model.model_dump().items() if key not in _REDACTED_FIELDS}


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit entry to the caller's transaction; it commits or rolls back with the change."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def audit_request_change(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    request: LeaveRequest,
    action: AuditAction,
    before: dict[str, Any] | None = None,
    deleted: bool = False,
    **ledger: int,
) -> AuditLog:
    """Record a leave request mutation.

    ``ledger`` carries the day counts and resulting balance of the change
    (e.g. ``days``, ``credited_days``, ``leave_balance``) and is stored
    alongside the request snapshot. A deleted request keeps only those.
    """
    after = {} if deleted else snapshot(request)
    after.update(ledger)
    return await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=action,
        before_json=before,
        after_json=after,
    )


async def audit_user_change(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    user: User,
    action: AuditAction,
    before: dict[str, Any] | None = None,
) -> AuditLog:
    """Record a registration or balance override."""
    return await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.USER,
        entity_id=user.id,
        action=action,
        before_json=before,
        after_json=snapshot(user),
    )
