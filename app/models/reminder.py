"""Reminder and notification models."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from .feeding import FeedingType


class Notification(BaseModel):
    """A notification held by the local notification center."""
    id: str
    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)
    sticky: bool = False
    silent: bool = False
    fire_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class ReminderStatus(BaseModel):
    """Current state of the reminder scheduler."""
    permission_granted: bool
    target_time: Optional[datetime] = None
    suggested_side: Optional[FeedingType] = None
    alarm_id: Optional[str] = None
    countdown: Optional[str] = None
    countdown_running: bool = False
