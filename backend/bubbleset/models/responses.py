"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    sessions: int = 0


class ElementModel(BaseModel):
    id: int
    x: float
    y: float
    radius: float


class ConnectorModel(BaseModel):
    id: int
    elem1: int
    elem2: int
    radius: float


class ClusterModel(BaseModel):
    id: int
    elements: list[ElementModel] = Field(default_factory=list)
    connectors: list[ConnectorModel] = Field(default_factory=list)
    outline: list[list[tuple[float, float]]] = Field(default_factory=list)
    dirty: bool = False


class SessionState(BaseModel):
    session_id: str
    level: int = 0
    dilation_radius: float = 0.0
    exclusion_active: bool = False
    selection: int | None = None
    clusters: list[ClusterModel] = Field(default_factory=list)


class StrokeResponse(BaseModel):
    action: str
    state: SessionState
