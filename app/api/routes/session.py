"""Endpoints for the in-progress feeding session."""

from fastapi import APIRouter, HTTPException, status

from app.api.dependencies import StoreDep
from app.models.feeding import (
    ActiveSession, FeedingRecord, FeedingStateResponse, StartFeedingRequest, StopFeedingRequest,
)
from app.services.feeding_session import SessionAlreadyActiveError

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=FeedingStateResponse)
async def get_state(store: StoreDep) -> FeedingStateResponse:
    """Full state: history, settings, running session and next feeding."""
    return store.snapshot()


@router.post("/start", response_model=ActiveSession, status_code=status.HTTP_201_CREATED)
async def start_feeding(payload: StartFeedingRequest, store: StoreDep) -> ActiveSession:
    """Start a left, right or bottle feeding."""
    try:
        return await store.start_feeding(payload.type)
    except SessionAlreadyActiveError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/stop", response_model=FeedingRecord, response_model_exclude_none=True)
async def stop_feeding(store: StoreDep, payload: StopFeedingRequest | None = None) -> FeedingRecord:
    """Stop the running feeding; `quantity_ml` is meant for bottles."""
    quantity = payload.quantity_ml if payload else None
    record = await store.stop_feeding(quantity)
    if record is None:
        raise HTTPException(status_code=409, detail="No feeding in progress")
    return record


@router.post("/refresh", response_model=FeedingStateResponse)
async def refresh(store: StoreDep) -> FeedingStateResponse:
    """Reload state from storage and re-arm the reminder."""
    await store.refresh()
    return store.snapshot()
