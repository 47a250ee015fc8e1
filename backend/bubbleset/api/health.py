"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from bubbleset.api.store import SessionStore
from bubbleset.dependencies import get_store
from bubbleset.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(store: SessionStore = Depends(get_store)) -> HealthResponse:
    return HealthResponse(status="ok", version="0.1.0", sessions=len(store))
