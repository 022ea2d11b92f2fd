"""Endpoints for the feeding history."""

from typing import Optional

from fastapi import APIRouter, Query, status

from app.api.dependencies import StoreDep
from app.models.feeding import DateWindow, FeedingRecord, FeedingSummary

router = APIRouter(prefix="/feedings", tags=["feedings"])


@router.get("", response_model=list[FeedingRecord], response_model_exclude_none=True)
async def get_feedings(
    store: StoreDep,
    window: Optional[DateWindow] = Query(
        None, description="today, yesterday or last7days; default: full history"
    ),
) -> list[FeedingRecord]:
    """Return feedings, most recent first."""
    return store.history(window)


@router.get("/summary", response_model=FeedingSummary)
async def get_summary(
    store: StoreDep,
    window: DateWindow = Query("today", description="today, yesterday or last7days"),
) -> FeedingSummary:
    """Feeding count and total time for a date window."""
    return store.summary(window)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_feedings(store: StoreDep) -> None:
    """Delete the whole feeding history and cancel reminders."""
    await store.clear_history()
