# app/launcharr/core/timewindow.py
"""
Calendar windows and the overdue rule.

All windows are naive local datetimes. A day window ends one second before
the next day starts so consecutive days never overlap.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

Window = Tuple[datetime, datetime]

ONE_SECOND = timedelta(seconds=1)
DEFAULT_BUFFER_MINUTES = 10

WINDOW_TOKENS = ("today", "tomorrow", "week", "next week", "month")


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _as_date(today) -> date:
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return today.date()
    return today


def resolve_window(token: str, today: Optional[date] = None) -> Window:
    """Map a calendar sub-argument to a (start, end) window."""
    day = _midnight(_as_date(today))
    token = (token or "").strip().lower()

    if token == "today":
        return day, day + timedelta(days=1) - ONE_SECOND
    if token == "tomorrow":
        start = day + timedelta(days=1)
        return start, start + timedelta(days=1) - ONE_SECOND
    if token == "next week":
        return day + timedelta(days=7), day + timedelta(days=14)
    if token == "month":
        return day, day + relativedelta(months=1)
    # "week", empty and anything unrecognized
    return day, day + timedelta(days=7)


def day_window(day) -> Window:
    start = _midnight(_as_date(day))
    return start, start + timedelta(days=1)


def yesterday_window(today: Optional[date] = None) -> Window:
    end = _midnight(_as_date(today))
    return end - timedelta(days=1), end


def prior_days_window(days: int, today: Optional[date] = None) -> Window:
    if days < 1:
        raise ValueError("Days back must be 1 or greater")
    end = _midnight(_as_date(today))
    return end - timedelta(days=days), end


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Convert aware values to naive local time; naive values are already local.

    Instants that cannot be represented locally come back as ``None``.
    """
    if value is None:
        return None
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value
    try:
        return value.astimezone().replace(tzinfo=None)
    except (OverflowError, ValueError, OSError):
        return None


def is_overdue(air_date: Optional[datetime], now: datetime,
               buffer_minutes: int = DEFAULT_BUFFER_MINUTES) -> bool:
    """
    True once ``air_date + buffer`` has been reached.

    An unknown or unrepresentable air date is never overdue.
    """
    air_local = to_local_naive(air_date)
    now_local = to_local_naive(now)
    if air_local is None or now_local is None:
        return False
    try:
        return air_local + timedelta(minutes=buffer_minutes) <= now_local
    except OverflowError:
        return False


def day_label(day: date, today: Optional[date] = None) -> str:
    """Header text for a calendar day group."""
    today = _as_date(today)
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return f"{day:%A}, {day:%b} {day.day}"


def describe_prior_days(days: int) -> str:
    return f"past {days} day" + ("" if days == 1 else "s")
