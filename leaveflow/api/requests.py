# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, BackgroundTasks, Query, status

from leaveflow.api.deps import AdminDep, AuthDep
from leaveflow.db import SessionDep
from leaveflow.models.enums import RequestStatus
from leaveflow.schemas.request import (
    LeaveRequestPayload,
    RequestListResponse,
    RequestResponse,
    WithdrawResponse,
)
from leaveflow.services import request as request_service

requests_router = APIRouter(
    prefix="/leave-requests",
    tags=["leave-requests"],
)


@requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    include_all: bool = Query(default=False, alias="all"),
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List leave requests. Admins pass all=true to see every user's."""
    return await request_service.list_requests(session, auth, include_all, status_filter, offset, limit)


@requests_router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: LeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
    background_tasks: BackgroundTasks,
) -> RequestResponse:
    """Submit a new leave request."""
    return await request_service.submit_request(session, auth, payload, background_tasks)


@requests_router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Get a single leave request."""
    return await request_service.get_request(session, auth, request_id)


@requests_router.put("/{request_id}", response_model=RequestResponse)
async def amend_request(
    request_id: uuid.UUID,
    payload: LeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Edit one of your pending leave requests."""
    return await request_service.amend_request(session, auth, request_id, payload)


@requests_router.delete("/{request_id}", response_model=WithdrawResponse)
async def withdraw_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> WithdrawResponse:
    """Withdraw (delete) one of your leave requests."""
    return await request_service.withdraw_request(session, auth, request_id)


@requests_router.post("/{request_id}/approve", response_model=RequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    background_tasks: BackgroundTasks,
) -> RequestResponse:
    """Approve a pending leave request (admin only)."""
    return await request_service.approve_request(session, auth, request_id, background_tasks)


@requests_router.post("/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    background_tasks: BackgroundTasks,
) -> RequestResponse:
    """Reject a pending leave request (admin only)."""
    return await request_service.reject_request(session, auth, request_id, background_tasks)
