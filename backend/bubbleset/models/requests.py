"""API request models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    width: float | None = Field(default=None, gt=0, description="Canvas width (defaults to settings)")
    height: float | None = Field(default=None, gt=0, description="Canvas height (defaults to settings)")


class PointRequest(BaseModel):
    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")


class AddElementRequest(PointRequest):
    radius: float | None = Field(default=None, gt=0, description="Element radius (defaults to config)")


class TranslateRequest(BaseModel):
    dx: float = Field(..., description="Displacement along x")
    dy: float = Field(..., description="Displacement along y")


class StrokeRequest(BaseModel):
    x1: float = Field(..., description="Stroke start x")
    y1: float = Field(..., description="Stroke start y")
    x2: float = Field(..., description="Stroke end x")
    y2: float = Field(..., description="Stroke end y")


class LevelRequest(BaseModel):
    direction: Literal["up", "down"] = Field(..., description="Aggregate (up) or disaggregate (down)")
