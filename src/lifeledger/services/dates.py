"""Calendar helpers shared by payoff dates and due-date projections."""

from __future__ import annotations

from calendar import monthrange
from datetime import date


def add_months(start: date, months: int) -> date:
    """Return *start* shifted by whole calendar months.

    The day is clamped to the length of the target month, so Jan 31 + 1 month
    lands on Feb 28 (or 29).
    """

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, monthrange(year, month)[1])
    return date(year, month, day)


def due_date_in_month(year: int, month: int, due_day: int) -> date:
    """Return the due date for a month, clamping day 29-31 to the month's end."""

    last_day = monthrange(year, month)[1]
    return date(year, month, max(1, min(due_day, last_day)))


def next_due_date(*, today: date, due_day: int) -> date:
    """Return the first due date on or after *today*."""

    candidate = due_date_in_month(today.year, today.month, due_day)
    if candidate >= today:
        return candidate
    following = add_months(today.replace(day=1), 1)
    return due_date_in_month(following.year, following.month, due_day)


__all__ = ["add_months", "due_date_in_month", "next_due_date"]
