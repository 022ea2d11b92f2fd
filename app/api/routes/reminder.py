"""Reminder status endpoint."""

from fastapi import APIRouter

from app.api.dependencies import StoreDep
from app.models.reminder import ReminderStatus

router = APIRouter(prefix="/reminder", tags=["reminder"])


@router.get("", response_model=ReminderStatus)
async def get_reminder(store: StoreDep) -> ReminderStatus:
    """Pending reminder, suggested side and countdown text."""
    return store.reminder_status()
