"""Next-feeding prediction: interval, side alternation and quiet hours."""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta

from app.models.feeding import BreastSide, Settings

# Quiet window during which no reminder fires, [start, end) in local hours
QUIET_HOURS_START = int(os.getenv("QUIET_HOURS_START", "23"))
QUIET_HOURS_END = int(os.getenv("QUIET_HOURS_END", "7"))


@dataclass(frozen=True)
class Prediction:
    next_feeding_time: datetime   # last end + interval, as computed
    reminder_time: datetime       # after night-mode adjustment
    suggested_side: BreastSide


def next_feeding_time(last_end: datetime, interval_minutes: int) -> datetime:
    return last_end + timedelta(minutes=interval_minutes)


def suggested_side(last_side: BreastSide) -> BreastSide:
    """Strict alternation: always the opposite of the last breast side."""
    return "right" if last_side == "left" else "left"


def in_quiet_hours(
    hour: int, start_hour: int = QUIET_HOURS_START, end_hour: int = QUIET_HOURS_END
) -> bool:
    if start_hour == end_hour:
        return False
    if start_hour > end_hour:
        # Window wraps around midnight
        return hour >= start_hour or hour < end_hour
    return start_hour <= hour < end_hour


def should_schedule_notification(
    when: datetime,
    night_enabled: bool,
    start_hour: int = QUIET_HOURS_START,
    end_hour: int = QUIET_HOURS_END,
) -> bool:
    """True if a reminder at `when` may fire as is."""
    return night_enabled or not in_quiet_hours(when.hour, start_hour, end_hour)


def night_adjust(
    when: datetime,
    night_enabled: bool,
    start_hour: int = QUIET_HOURS_START,
    end_hour: int = QUIET_HOURS_END,
) -> datetime:
    """Defer a time falling in the quiet window to `end_hour`:00.

    The late-evening part of a wrapping window moves to the next day, the
    early-morning part to the same day. Applying it twice is the same as once.
    """
    if should_schedule_notification(when, night_enabled, start_hour, end_hour):
        return when

    adjusted = when.replace(hour=end_hour, minute=0, second=0, microsecond=0)
    if start_hour > end_hour and when.hour >= start_hour:
        adjusted += timedelta(days=1)
    return adjusted


def predict(last_end: datetime, settings: Settings, last_side: BreastSide) -> Prediction:
    raw = next_feeding_time(last_end, settings.interval_minutes)
    return Prediction(
        next_feeding_time=raw,
        reminder_time=night_adjust(raw, settings.night_notifications_enabled),
        suggested_side=suggested_side(last_side),
    )
