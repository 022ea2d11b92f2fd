"""Healthcheck endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from app.api.dependencies import StoreDep

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    notifications_permitted: bool
    session_active: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(store: StoreDep) -> HealthResponse:
    """Return service status, notification permission and session state."""
    return HealthResponse(
        status="ok",
        notifications_permitted=store.scheduler.permission_granted,
        session_active=store.state.is_active,
    )
