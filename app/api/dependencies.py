"""Reusable FastAPI dependencies (feeding store)."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from app.services.feeding_store import FeedingStore


def get_store(request: Request) -> FeedingStore:
    """Return the feeding store created by the application lifespan."""
    store = getattr(request.app.state, "feeding_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Feeding store not initialized")
    return store


StoreDep = Annotated[FeedingStore, Depends(get_store)]
