# ruff: noqa: TC001, TC003
from __future__ import annotations

import re
import uuid
from datetime import date, datetime
from typing import Annotated, Any, Self

from pydantic import BaseModel, BeforeValidator, Field, model_validator

from leaveflow.models.enums import LeaveType, NotificationKind, RequestStatus

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_calendar_date(value: Any) -> Any:
    """Accept only YYYY-MM-DD strings (or date objects) for calendar dates."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        msg = "Date must be in YYYY-MM-DD format"
        raise ValueError(msg)
    return date.fromisoformat(value)


CalendarDate = Annotated[date, BeforeValidator(_parse_calendar_date)]

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class LeaveRequestPayload(BaseModel):
    """Request body for submitting or amending a leave request."""

    start_date: CalendarDate
    end_date: CalendarDate
    leave_type: LeaveType
    reason: str = Field(min_length=1, max_length=2000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must be on or after start_date"
            raise ValueError(msg)
        if not self.reason.strip():
            msg = "reason is required"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestOwner(BaseModel):
    """Identity fields of the user who owns a request."""

    id: uuid.UUID
    name: str
    email: str


class RequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str
    status: RequestStatus
    days: int
    created_at: datetime
    user: RequestOwner


class RequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[RequestResponse]
    total: int


class WithdrawResponse(BaseModel):
    """Outcome of withdrawing a leave request."""

    message: str
    credited_days: int
    leave_balance: int


# ---------------------------------------------------------------------------
# Notification event
# ---------------------------------------------------------------------------


class LeaveNotification(BaseModel):
    """Event record handed to the notification sink."""

    kind: NotificationKind
    employee_name: str
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str | None = None
    days: int
    remaining_balance: int
