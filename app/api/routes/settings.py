"""Endpoints for baby profile and reminder settings."""

from fastapi import APIRouter

from app.api.dependencies import StoreDep
from app.models.feeding import Settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=Settings)
async def get_settings(store: StoreDep) -> Settings:
    return store.state.settings


@router.put("", response_model=Settings)
async def update_settings(payload: Settings, store: StoreDep) -> Settings:
    """Replace settings; the reminder follows the new interval / night mode."""
    return await store.update_settings(payload)
