# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, select, update
from sqlmodel import col

from leaveflow.config import get_settings
from leaveflow.exceptions import InvalidState, RequestNotFound
from leaveflow.models.enums import AuditAction, LeaveType, NotificationKind, RequestStatus
from leaveflow.models.request import LeaveRequest
from leaveflow.models.user import User
from leaveflow.schemas.request import (
    LeaveNotification,
    RequestListResponse,
    RequestOwner,
    RequestResponse,
    WithdrawResponse,
)
from leaveflow.services.audit import audit_request_change, snapshot
from leaveflow.services.balance import adjust_balance, credit_balance, debit_balance, get_balance
from leaveflow.services.days import count_leave_days
from leaveflow.services.notification import dispatch_notification

if TYPE_CHECKING:
    from fastapi import BackgroundTasks
    from sqlalchemy.ext.asyncio import AsyncSession

    from leaveflow.schemas.auth import AuthContext
    from leaveflow.schemas.request import LeaveRequestPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: LeaveRequest, owner: RequestOwner) -> RequestResponse:
    """Map a request model and its owner to the response schema."""
    return RequestResponse(
        id=request.id,
        start_date=request.start_date,
        end_date=request.end_date,
        leave_type=LeaveType(request.leave_type),
        reason=request.reason,
        status=RequestStatus(request.status),
        days=count_leave_days(request.start_date, request.end_date),
        created_at=request.created_at,
        user=owner,
    )


def _owner_from_user(user: User) -> RequestOwner:
    return RequestOwner(id=user.id, name=user.name, email=user.email)


def _owner_from_auth(auth: AuthContext) -> RequestOwner:
    return RequestOwner(id=auth.user_id, name=auth.name, email=auth.email)


def _build_notification(
    kind: NotificationKind,
    request: LeaveRequest,
    employee_name: str,
    remaining_balance: int,
) -> LeaveNotification:
    return LeaveNotification(
        kind=kind,
        employee_name=employee_name,
        start_date=request.start_date,
        end_date=request.end_date,
        leave_type=LeaveType(request.leave_type),
        reason=request.reason if kind == NotificationKind.NEW_REQUEST else None,
        days=count_leave_days(request.start_date, request.end_date),
        remaining_balance=remaining_balance,
    )


async def _notify(background_tasks: BackgroundTasks | None, event: LeaveNotification) -> None:
    """Hand the event to the sink once the caller's transaction has committed."""
    if background_tasks is not None:
        background_tasks.add_task(dispatch_notification, event)
    else:
        await dispatch_notification(event)


async def _get_request_with_owner_or_404(
    session: AsyncSession,
    request_id: uuid.UUID,
) -> tuple[LeaveRequest, User]:
    """Fetch a request joined with its owner. Raises RequestNotFound if absent."""
    result = await session.execute(
        select(LeaveRequest, User)
        .join(User, col(LeaveRequest.user_id) == col(User.id))
        .where(col(LeaveRequest.id) == request_id)
        .execution_options(populate_existing=True)
    )
    row = result.one_or_none()
    if row is None:
        raise RequestNotFound
    return row[0], row[1]


async def _get_owned_request_or_404(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequest:
    """Fetch a request owned by the caller.

    A request that exists but belongs to someone else is reported exactly like
    a missing one.
    """
    result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.id) == request_id,
            col(LeaveRequest.user_id) == auth.user_id,
        ).execution_options(populate_existing=True)
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise RequestNotFound
    return request


async def _update_pending_request(
    session: AsyncSession,
    request: LeaveRequest,
    values: dict[str, Any],
    message: str,
) -> None:
    """Apply values to a request only if it is still pending.

    The status condition is part of the UPDATE, so a concurrent decision or
    amendment that got there first makes this one fail with InvalidState.
    """
    result = await session.execute(
        update(LeaveRequest)
        .where(
            col(LeaveRequest.id) == request.id,
            col(LeaveRequest.status) == RequestStatus.PENDING.value,
        )
        .values(**values)
    )
    if result.rowcount != 1:  # ty: ignore[unresolved-attribute]
        raise InvalidState(message)
    await session.refresh(request)


# ---------------------------------------------------------------------------
# Ledger operations
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: LeaveRequestPayload,
    background_tasks: BackgroundTasks | None = None,
) -> RequestResponse:
    """Submit a leave request, debiting its day span from the balance immediately.

    Flow:
    1. Compute the inclusive day span.
    2. Debit the balance (conditional UPDATE; fails with nothing written).
    3. Insert the request as pending.
    4. Write audit log.
    5. Commit, then notify.
    """
    days = count_leave_days(payload.start_date, payload.end_date)

    try:
        new_balance = await debit_balance(session, auth.user_id, days)

        leave_request = LeaveRequest(
            user_id=auth.user_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            leave_type=payload.leave_type.value,
            reason=payload.reason,
            status=RequestStatus.PENDING.value,
        )
        session.add(leave_request)
        await session.flush()

        await audit_request_change(
            session,
            actor_id=auth.user_id,
            request=leave_request,
            action=AuditAction.SUBMIT,
            days=days,
            leave_balance=new_balance,
        )

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(leave_request)
    logger.info(
        "Leave request %s submitted by %s: %d day(s), balance now %d",
        leave_request.id,
        auth.user_id,
        days,
        new_balance,
    )

    await _notify(
        background_tasks,
        _build_notification(NotificationKind.NEW_REQUEST, leave_request, auth.name, new_balance),
    )
    return _build_request_response(leave_request, _owner_from_auth(auth))


async def amend_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: LeaveRequestPayload,
) -> RequestResponse:
    """Edit a pending request, charging or refunding the change in day span."""
    try:
        leave_request = await _get_owned_request_or_404(session, auth, request_id)
        if leave_request.status != RequestStatus.PENDING.value:
            raise InvalidState("Can only update pending requests")

        old_days = count_leave_days(leave_request.start_date, leave_request.end_date)
        new_days = count_leave_days(payload.start_date, payload.end_date)
        delta = new_days - old_days
        before_dict = snapshot(leave_request)

        new_balance = await adjust_balance(session, auth.user_id, delta)

        await _update_pending_request(
            session,
            leave_request,
            {
                "start_date": payload.start_date,
                "end_date": payload.end_date,
                "leave_type": payload.leave_type.value,
                "reason": payload.reason,
            },
            "Can only update pending requests",
        )

        await audit_request_change(
            session,
            actor_id=auth.user_id,
            request=leave_request,
            action=AuditAction.AMEND,
            before=before_dict,
            delta_days=delta,
            leave_balance=new_balance,
        )

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Leave request %s amended by %s: %d -> %d day(s), balance now %d",
        leave_request.id,
        auth.user_id,
        old_days,
        new_days,
        new_balance,
    )
    return _build_request_response(leave_request, _owner_from_auth(auth))


def _withdraw_credit(status: RequestStatus, days: int) -> int:
    """Days to credit back on withdrawal under the configured policy.

    ``always`` credits regardless of status, so a rejected request (already
    credited at rejection) is credited a second time. ``skip_rejected`` avoids
    that. ``pending_only`` refuses to withdraw anything but a pending request.
    """
    policy = get_settings().withdraw_credit_policy
    if policy == "pending_only" and status != RequestStatus.PENDING:
        raise InvalidState("Only pending requests can be withdrawn")
    if policy == "skip_rejected" and status == RequestStatus.REJECTED:
        return 0
    return days


async def withdraw_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> WithdrawResponse:
    """Delete one of the caller's requests and credit its days back."""
    try:
        leave_request = await _get_owned_request_or_404(session, auth, request_id)
        status = RequestStatus(leave_request.status)
        days = count_leave_days(leave_request.start_date, leave_request.end_date)
        credited = _withdraw_credit(status, days)
        before_dict = snapshot(leave_request)

        # Conditioned on the status read above so the credit decision stays valid.
        result = await session.execute(
            delete(LeaveRequest).where(
                col(LeaveRequest.id) == leave_request.id,
                col(LeaveRequest.user_id) == auth.user_id,
                col(LeaveRequest.status) == status.value,
            )
        )
        if result.rowcount != 1:  # ty: ignore[unresolved-attribute]
            raise InvalidState("Leave request changed while it was being withdrawn")

        new_balance = await credit_balance(session, auth.user_id, credited)

        await audit_request_change(
            session,
            actor_id=auth.user_id,
            request=leave_request,
            action=AuditAction.WITHDRAW,
            before=before_dict,
            deleted=True,
            credited_days=credited,
            leave_balance=new_balance,
        )

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Leave request %s (%s) withdrawn by %s: credited %d day(s), balance now %d",
        request_id,
        status.value,
        auth.user_id,
        credited,
        new_balance,
    )
    return WithdrawResponse(
        message="Leave request deleted successfully",
        credited_days=credited,
        leave_balance=new_balance,
    )


async def approve_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    background_tasks: BackgroundTasks | None = None,
) -> RequestResponse:
    """Approve a pending request. The balance was already debited at submission."""
    try:
        leave_request, owner = await _get_request_with_owner_or_404(session, request_id)
        if leave_request.status != RequestStatus.PENDING.value:
            raise InvalidState("Only pending requests can be approved")

        before_dict = snapshot(leave_request)
        await _update_pending_request(
            session,
            leave_request,
            {"status": RequestStatus.APPROVED.value},
            "Only pending requests can be approved",
        )

        await audit_request_change(
            session,
            actor_id=auth.user_id,
            request=leave_request,
            action=AuditAction.APPROVE,
            before=before_dict,
        )

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    balance = await get_balance(session, owner.id)
    logger.info("Leave request %s approved by %s", leave_request.id, auth.user_id)

    await _notify(
        background_tasks,
        _build_notification(NotificationKind.APPROVED, leave_request, owner.name, balance),
    )
    return _build_request_response(leave_request, _owner_from_user(owner))


async def reject_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    background_tasks: BackgroundTasks | None = None,
) -> RequestResponse:
    """Reject a pending request and credit its days back to the owner."""
    try:
        leave_request, owner = await _get_request_with_owner_or_404(session, request_id)
        if leave_request.status != RequestStatus.PENDING.value:
            raise InvalidState("Only pending requests can be rejected")

        days = count_leave_days(leave_request.start_date, leave_request.end_date)
        before_dict = snapshot(leave_request)

        await _update_pending_request(
            session,
            leave_request,
            {"status": RequestStatus.REJECTED.value},
            "Only pending requests can be rejected",
        )
        new_balance = await credit_balance(session, owner.id, days)

        await audit_request_change(
            session,
            actor_id=auth.user_id,
            request=leave_request,
            action=AuditAction.REJECT,
            before=before_dict,
            credited_days=days,
            leave_balance=new_balance,
        )

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Leave request %s rejected by %s: credited %d day(s), balance now %d",
        leave_request.id,
        auth.user_id,
        days,
        new_balance,
    )

    await _notify(
        background_tasks,
        _build_notification(NotificationKind.REJECTED, leave_request, owner.name, new_balance),
    )
    return _build_request_response(leave_request, _owner_from_user(owner))


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> RequestResponse:
    """Get a single request visible to the caller (owner or admin)."""
    leave_request, owner = await _get_request_with_owner_or_404(session, request_id)
    if owner.id != auth.user_id and not auth.is_admin:
        raise RequestNotFound
    return _build_request_response(leave_request, _owner_from_user(owner))


async def list_requests(
    session: AsyncSession,
    auth: AuthContext,
    include_all: bool = False,
    status_filter: RequestStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List requests newest-first.

    Employees always see only their own requests; an admin sees everyone's
    when include_all is set.
    """
    base_filters = []
    if not (auth.is_admin and include_all):
        base_filters.append(col(LeaveRequest.user_id) == auth.user_id)
    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest, User)
        .join(User, col(LeaveRequest.user_id) == col(User.id))
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc(), col(LeaveRequest.id))
        .offset(offset)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    rows = result.all()

    return RequestListResponse(
        items=[_build_request_response(request, _owner_from_user(owner)) for request, owner in rows],
        total=total,
    )
