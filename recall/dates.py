from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike | None) -> Optional[date]:
    """
    Coerce an ISO date string, `date` or `datetime` to a date-only value.

    Time-of-day is dropped; no timezone conversion is performed. Empty strings
    read as "no date".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    # Accept full ISO timestamps by keeping the calendar part only.
    return date.fromisoformat(text[:10])


def format_date(value: date | None) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=int(days))


def elapsed_days(last_review: DateLike | None, today: DateLike) -> int:
    """Whole days since `last_review`; 0 for never-reviewed or future dates."""
    last = parse_date(last_review)
    if last is None:
        return 0
    return max(0, (_require(today) - last).days)


def days_until_due(next_review: DateLike | None, today: DateLike) -> Optional[int]:
    """Days until `next_review`; negative when overdue, None when unscheduled."""
    due = parse_date(next_review)
    if due is None:
        return None
    return (due - _require(today)).days


def is_due(next_review: DateLike | None, today: DateLike) -> bool:
    days = days_until_due(next_review, today)
    return days is not None and days <= 0


@dataclass(frozen=True)
class ReviewStatus:
    urgency: str
    days: Optional[int]


def review_status(next_review: DateLike | None, today: DateLike) -> ReviewStatus:
    days = days_until_due(next_review, today)
    if days is None:
        return ReviewStatus("none", None)
    if days < 0:
        return ReviewStatus("overdue", days)
    if days == 0:
        return ReviewStatus("today", days)
    if days == 1:
        return ReviewStatus("tomorrow", days)
    if days <= 3:
        return ReviewStatus("soon", days)
    return ReviewStatus("normal", days)


def _require(value: DateLike) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError("A reference date is required.")
    return parsed
