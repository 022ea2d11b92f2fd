"""Pure time, age and duration helpers used by the store and the API."""

import math
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from app.models.feeding import BabyAge, DateWindow, FeedingRecord, FeedingSummary


def calculate_age(birth_date: date, now: datetime) -> BabyAge:
    """Calendar-aware age in months and days.

    A birth date after `now` makes the month count negative. In that case the
    result falls back to `months=0` and the floor of the elapsed days, which
    is itself negative: this is a clamp for malformed input, not a guarantee
    that the returned age is meaningful.
    """
    months = (now.year - birth_date.year) * 12 + (now.month - birth_date.month)
    days = now.day - birth_date.day

    if days < 0:
        months -= 1
        last_day_prev_month = now.replace(day=1) - timedelta(days=1)
        days = last_day_prev_month.day + days

    if months < 0:
        elapsed = now - datetime.combine(birth_date, time(), tzinfo=now.tzinfo)
        return BabyAge(months=0, days=elapsed.days)

    return BabyAge(months=months, days=days)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''}"


def format_baby_age(age: BabyAge) -> str:
    if age.months == 0:
        return _plural(age.days, "day")
    return f"{_plural(age.months, 'month')} {_plural(age.days, 'day')}"


def calculate_duration(start: datetime, end: datetime) -> int:
    """Whole minutes between two timestamps, rounded half up."""
    minutes = (end - start).total_seconds() / 60
    return math.floor(minutes + 0.5)


def format_duration(minutes: int) -> str:
    """45 -> '45 min', 125 -> '2h 5min'."""
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}min"


def format_time(dt: datetime) -> str:
    return dt.strftime("%H:%M")


def format_datetime(dt: datetime) -> str:
    """Short history label, e.g. 'Oct 18, 14:05'."""
    return f"{dt.strftime('%b')} {dt.day}, {dt.strftime('%H:%M')}"


def format_countdown(remaining: timedelta) -> str:
    """Text shown until the next feeding."""
    total_seconds = int(remaining.total_seconds())
    if total_seconds <= 0:
        return "Time to feed!"

    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_elapsed(seconds: int) -> str:
    """Running session timer as MM:SS (minutes keep counting past 59)."""
    seconds = max(0, seconds)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def _midnight(now: datetime) -> datetime:
    return datetime.combine(now.date(), time(), tzinfo=now.tzinfo)


def filter_by_date_window(
    records: Iterable[FeedingRecord], window: DateWindow, now: datetime
) -> list[FeedingRecord]:
    """Keep records whose end time falls in the window.

    Lower bounds are inclusive; the 'yesterday' upper bound (today's midnight)
    is exclusive.
    """
    today = _midnight(now)
    yesterday = today - timedelta(days=1)
    week_ago = today - timedelta(days=7)

    if window == "today":
        return [r for r in records if r.end_time >= today]
    if window == "yesterday":
        return [r for r in records if yesterday <= r.end_time < today]
    if window == "last7days":
        return [r for r in records if r.end_time >= week_ago]
    raise ValueError(f"Unknown date window: {window!r}")


def total_feeding_minutes(records: Iterable[FeedingRecord]) -> int:
    return sum(r.duration_minutes for r in records)


def total_bottle_ml(records: Iterable[FeedingRecord]) -> int:
    return sum(r.quantity_ml or 0 for r in records if r.type == "bottle")


def summarize(
    records: Iterable[FeedingRecord], window: DateWindow, now: datetime
) -> FeedingSummary:
    """Count and totals for one date window."""
    selected = filter_by_date_window(records, window, now)
    total = total_feeding_minutes(selected)
    return FeedingSummary(
        window=window,
        count=len(selected),
        total_minutes=total,
        total_formatted=format_duration(total),
        total_bottle_ml=total_bottle_ml(selected),
    )
