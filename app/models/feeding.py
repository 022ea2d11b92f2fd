"""Pydantic models for feeding sessions, settings and predictions."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


FeedingType = Literal["left", "right", "bottle"]
BreastSide = Literal["left", "right"]
DateWindow = Literal["today", "yesterday", "last7days"]


class FeedingRecord(BaseModel):
    """A finished feeding, immutable once created."""
    id: str
    type: FeedingType
    start_time: datetime
    end_time: datetime
    duration_minutes: int = Field(..., ge=0)
    quantity_ml: Optional[int] = Field(None, gt=0, description="Quantity in milliliters")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _end_after_start(self) -> "FeedingRecord":
        if self.end_time < self.start_time:
            raise ValueError("end_time must be >= start_time")
        return self


class ActiveSession(BaseModel):
    """The feeding currently in progress."""
    type: FeedingType
    start_time: datetime

    model_config = {"frozen": True}


class Settings(BaseModel):
    interval_minutes: int = Field(120, gt=0, description="Minutes between feedings")
    night_notifications_enabled: bool = True
    baby_name: str = Field("Baby", min_length=1, max_length=100)
    baby_birth_date: date = Field(default_factory=date.today)

    @field_validator("baby_name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class BabyAge(BaseModel):
    months: int
    days: int


class StartFeedingRequest(BaseModel):
    """Payload to start a feeding session."""
    type: FeedingType


class StopFeedingRequest(BaseModel):
    """Payload to stop the running session. Quantity is meant for bottles."""
    quantity_ml: Optional[int] = Field(None, gt=0)


class FeedingSummary(BaseModel):
    """Totals over a date window."""
    window: DateWindow
    count: int
    total_minutes: int
    total_formatted: str
    total_bottle_ml: int


class FeedingStateResponse(BaseModel):
    """Read-only state rendered by the presentation layer."""
    feedings: list[FeedingRecord]
    settings: Settings
    active_session: Optional[ActiveSession] = None
    elapsed: Optional[str] = None
    last_side: BreastSide
    suggested_side: BreastSide
    next_feeding_time: Optional[datetime] = None
    reminder_time: Optional[datetime] = None
    baby_age: BabyAge
    baby_age_label: str
    is_loading: bool
