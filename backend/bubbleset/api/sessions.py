"""/api/sessions/*: drive a bubble-set session over HTTP."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException

from bubbleset.api.store import SessionEntry, SessionStore
from bubbleset.config import Settings
from bubbleset.dependencies import get_settings, get_store
from bubbleset.engine.session import BubbleSession, SessionError
from bubbleset.models.requests import (
    AddElementRequest,
    CreateSessionRequest,
    LevelRequest,
    PointRequest,
    StrokeRequest,
    TranslateRequest,
)
from bubbleset.models.responses import SessionState, StrokeResponse
from bubbleset.utils.geometry import Vector

router = APIRouter(prefix="/sessions")

T = TypeVar("T")


def _entry(session_id: str, store: SessionStore) -> SessionEntry:
    try:
        return store.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}") from None


def _state(session_id: str, session: BubbleSession) -> SessionState:
    session.polygonize()
    return SessionState(session_id=session_id, **session.snapshot())


def _apply(session_id: str, store: SessionStore, edit: Callable[[BubbleSession], T]) -> tuple[T, SessionState]:
    """Run edit under the session lock and return its result with the refreshed state."""
    entry = _entry(session_id, store)
    with entry.lock:
        try:
            result = edit(entry.session)
        except SessionError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        return result, _state(session_id, entry.session)


@router.post("", response_model=SessionState)
async def create_session(
    req: CreateSessionRequest | None = None,
    store: SessionStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SessionState:
    req = req or CreateSessionRequest()
    session_id, entry = store.create(settings.engine_config(req.width, req.height))
    with entry.lock:
        return _state(session_id, entry.session)


@router.get("/{session_id}", response_model=SessionState)
async def get_session(session_id: str, store: SessionStore = Depends(get_store)) -> SessionState:
    _, state = _apply(session_id, store, lambda s: None)
    return state


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str, store: SessionStore = Depends(get_store)) -> None:
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")


@router.post("/{session_id}/elements", response_model=SessionState)
async def add_element(session_id: str, req: AddElementRequest, store: SessionStore = Depends(get_store)) -> SessionState:
    _, state = _apply(session_id, store, lambda s: s.add_element(Vector(req.x, req.y), req.radius))
    return state


@router.post("/{session_id}/select", response_model=SessionState)
async def select(session_id: str, req: PointRequest, store: SessionStore = Depends(get_store)) -> SessionState:
    _, state = _apply(session_id, store, lambda s: s.select(Vector(req.x, req.y)))
    return state


@router.post("/{session_id}/translate", response_model=SessionState)
async def translate(session_id: str, req: TranslateRequest, store: SessionStore = Depends(get_store)) -> SessionState:
    _, state = _apply(session_id, store, lambda s: s.translate_selection(Vector(req.dx, req.dy)))
    return state


@router.post("/{session_id}/release", response_model=SessionState)
async def release(session_id: str, store: SessionStore = Depends(get_store)) -> SessionState:
    _, state = _apply(session_id, store, lambda s: s.release())
    return state


@router.post("/{session_id}/strokes", response_model=StrokeResponse)
async def stroke(session_id: str, req: StrokeRequest, store: SessionStore = Depends(get_store)) -> StrokeResponse:
    action, state = _apply(
        session_id,
        store,
        lambda s: s.apply_stroke(Vector(req.x1, req.y1), Vector(req.x2, req.y2)),
    )
    return StrokeResponse(action=action.value, state=state)


@router.post("/{session_id}/level", response_model=SessionState)
async def change_level(session_id: str, req: LevelRequest, store: SessionStore = Depends(get_store)) -> SessionState:
    def edit(s: BubbleSession) -> None:
        if req.direction == "up":
            s.up_level()
        else:
            s.down_level()

    _, state = _apply(session_id, store, edit)
    return state
