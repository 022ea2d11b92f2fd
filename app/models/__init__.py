from .feeding import (
    ActiveSession, BabyAge, BreastSide, DateWindow, FeedingRecord, FeedingStateResponse,
    FeedingSummary, FeedingType, Settings, StartFeedingRequest, StopFeedingRequest,
)
from .reminder import Notification, ReminderStatus

__all__ = [
    "ActiveSession", "BabyAge", "BreastSide", "DateWindow",
    "FeedingRecord", "FeedingStateResponse", "FeedingSummary", "FeedingType",
    "Settings", "StartFeedingRequest", "StopFeedingRequest",
    "Notification", "ReminderStatus",
]
