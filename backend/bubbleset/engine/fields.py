"""Scalar potential fields emitted by primitives.

Each field is an immutable value holding its kernel parameters; calling it
evaluates the field at (x, y). Inputs may be scalars or numpy arrays of the
same shape, so a whole grid block is sampled in one call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

import numpy as np
from numpy.typing import NDArray

from bubbleset.utils.geometry import Vector, segment_distance_grid

FieldValue = Union[float, NDArray[np.float64]]


class Field(Protocol):
    def __call__(self, x: FieldValue, y: FieldValue) -> FieldValue: ...


def _as_result(values: NDArray[np.float64]) -> FieldValue:
    if values.ndim == 0:
        return float(values)
    return values


@dataclass(frozen=True)
class RadialKernel:
    """Compactly supported falloff: f * (d - r1)^2 inside r1, zero beyond.

    Equals 1 at d == r0 and decays smoothly to 0 (with zero slope) at d == r1.
    """

    r0: float
    r1: float

    def __post_init__(self) -> None:
        if self.r1 <= self.r0:
            raise ValueError(f"kernel support r1={self.r1} must exceed r0={self.r0}")

    def __call__(self, d: FieldValue) -> FieldValue:
        d = np.asarray(d, dtype=np.float64)
        a = self.r1 - self.r0
        r = d - self.r1
        return _as_result(np.where(r > 0, 0.0, r * r / (a * a)))


@dataclass(frozen=True)
class DiskField:
    """Kernel applied to the distance from a centre point."""

    cx: float
    cy: float
    kernel: RadialKernel

    def __call__(self, x: FieldValue, y: FieldValue) -> FieldValue:
        d = np.hypot(np.asarray(x, dtype=np.float64) - self.cx, np.asarray(y, dtype=np.float64) - self.cy)
        return self.kernel(d)


@dataclass(frozen=True)
class CapsuleField:
    """Kernel applied to the distance from segment (ax, ay)-(bx, by)."""

    ax: float
    ay: float
    bx: float
    by: float
    kernel: RadialKernel

    def __call__(self, x: FieldValue, y: FieldValue) -> FieldValue:
        d = segment_distance_grid(x, y, Vector(self.ax, self.ay), Vector(self.bx, self.by))
        return self.kernel(d)


@dataclass(frozen=True)
class SumField:
    """Pointwise sum of several fields; empty sums evaluate to zero."""

    parts: tuple[Field, ...]

    def __call__(self, x: FieldValue, y: FieldValue) -> FieldValue:
        total = np.zeros(np.broadcast(np.asarray(x), np.asarray(y)).shape)
        for part in self.parts:
            total = total + part(x, y)
        return _as_result(np.asarray(total))
