"""
POW session arithmetic and time-window filters.

Durations are tracked in seconds; minutes are kept for older clients and
derived from seconds with half-up rounding. All windows are expressed in
naive UTC, matching the stored timestamps.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from citadel_pow.core.database import utc_now
from citadel_pow.core.errors import InvalidRequestError

TimeWindow = Tuple[Optional[datetime], Optional[datetime]]

PERIODS = ("today", "week", "month")


def resolve_seconds(seconds: Optional[int], minutes: Optional[int]) -> int:
    """Seconds take priority; otherwise minutes * 60; otherwise 0."""
    if seconds is not None:
        return seconds
    if minutes:
        return minutes * 60
    return 0


def seconds_to_minutes(seconds: int) -> int:
    """Round seconds to whole minutes, halves rounding up."""
    return math.floor(seconds / 60 + 0.5)


def achievement_rate(
    *,
    duration_seconds: Optional[int],
    duration_minutes: Optional[int],
    goal_seconds: Optional[int],
    goal_minutes: Optional[int],
) -> int:
    """Percentage of the goal reached by a session, uncapped.

    Sessions without any goal count as fully achieved.
    """
    if goal_seconds and goal_seconds > 0:
        seconds = duration_seconds or (duration_minutes or 0) * 60
        return math.floor(seconds / goal_seconds * 100)
    if goal_minutes and goal_minutes > 0:
        return math.floor((duration_minutes or 0) / goal_minutes * 100)
    return 100


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """First and last instant of a calendar day."""
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise InvalidRequestError("Invalid date format. Use YYYY-MM-DD", details={"date": value}) from e


def period_bounds(period: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Window of a named period ending at the end of today.

    - ``today``: today
    - ``week``: from the start of the day seven days ago
    - ``month``: from the first day of the current month
    """
    today = (now or utc_now()).date()
    end = datetime.combine(today, time.max)
    if period == "today":
        start_day = today
    elif period == "week":
        start_day = today - timedelta(days=7)
    elif period == "month":
        start_day = today.replace(day=1)
    else:
        raise InvalidRequestError('Invalid period. Use "today", "week", or "month"', details={"period": period})
    return datetime.combine(start_day, time.min), end


def month_bounds(month: str) -> Tuple[datetime, datetime]:
    """First and last instant of a ``YYYY-MM`` month."""
    try:
        first = datetime.strptime(month, "%Y-%m").date()
    except ValueError as e:
        raise InvalidRequestError("Invalid month format. Use YYYY-MM", details={"month": month}) from e
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return datetime.combine(first, time.min), datetime.combine(next_first - timedelta(days=1), time.max)


def session_window(period: Optional[str] = None, day: Optional[str] = None, now: Optional[datetime] = None) -> TimeWindow:
    """Combine the ``period`` and ``date`` query filters into one window.

    When both are given, both constraints apply.
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    if period:
        start, end = period_bounds(period, now)
    if day:
        day_start, day_end = day_bounds(parse_date(day))
        start = max(start, day_start) if start else day_start
        end = min(end, day_end) if end else day_end
    return start, end
