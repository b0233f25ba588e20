"""Day-span arithmetic shared by every ledger operation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date


def count_leave_days(start_date: date, end_date: date) -> int:
    """Return the inclusive number of calendar days from start_date to end_date.

    A single-day request (start == end) costs 1 day. Callers validate that
    end_date is not before start_date.
    """
    return (end_date - start_date).days + 1
